"""
Batched resource store.

Persists each unique URL exactly once and hands the resulting local
reference to every task that asked for it.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Set

from ..utils.log import get_logger
from ..utils.paths import normalize_url
from ..utils.constants import DEFAULT_CONCURRENCY


# persist(url) -> local reference; raises StoreError / FetchError
PersistFunc = Callable[[str], Awaitable[str]]


@dataclass
class ResourceTask:
    """A request to persist one URL and receive its local reference."""
    
    url: str
    callback: Callable[[str], None]


@dataclass
class ResourceRecord:
    """A persisted resource."""
    
    url: str
    local_ref: str


@dataclass
class TaskFailure:
    """A task whose resource could not be persisted."""
    
    url: str
    error: Exception


@dataclass
class BatchResult:
    """Outcome of one batch."""
    
    records: Dict[str, ResourceRecord] = field(default_factory=dict)
    failures: List[TaskFailure] = field(default_factory=list)
    
    @property
    def ok(self) -> bool:
        return not self.failures


class ResourceStore:
    """
    Acquire-and-persist cache keyed by normalized absolute URL.
    
    Records survive across batches, so a URL persisted once in a session is
    never persisted again.
    """
    
    def __init__(
        self,
        persist: PersistFunc,
        concurrency: int = DEFAULT_CONCURRENCY
    ):
        """
        Initialize the store.
        
        Args:
            persist: Async capability that saves a URL and returns its reference
            concurrency: Maximum persist calls in flight
        """
        self.persist = persist
        self.concurrency = concurrency
        self.logger = get_logger("store")
        
        self._records: Dict[str, ResourceRecord] = {}
        self._failed: Set[str] = set()
        
        # Persist calls in flight, shared by overlapping batches
        self._inflight: Dict[str, "asyncio.Future[ResourceRecord]"] = {}
        
        self._semaphore = asyncio.Semaphore(concurrency)
    
    @property
    def records(self) -> Dict[str, ResourceRecord]:
        """Mapping of normalized URL to its record."""
        return self._records.copy()
    
    @property
    def failed_urls(self) -> Set[str]:
        """URLs that could not be persisted."""
        return self._failed.copy()
    
    @staticmethod
    def key_for(url: str) -> str:
        """Deduplication key of a URL."""
        return normalize_url(url) or url
    
    async def batch_save(self, tasks: Iterable[ResourceTask]) -> BatchResult:
        """
        Persist every unique URL of a batch and fire all callbacks.
        
        Callbacks of URLs that fail are not called; each such task is
        reported in the result instead.
        
        Args:
            tasks: Resource tasks, duplicates allowed
            
        Returns:
            BatchResult with the records used and per-task failures
        """
        groups: Dict[str, List[ResourceTask]] = {}
        first_urls: Dict[str, str] = {}
        
        for task in tasks:
            key = self.key_for(task.url)
            if key not in groups:
                groups[key] = []
                first_urls[key] = task.url
            groups[key].append(task)
        
        result = BatchResult()
        
        if not groups:
            return result
        
        pending = [key for key in groups if key not in self._records]
        
        if pending:
            self.logger.info(
                f"Storing {len(pending)} resources "
                f"({len(groups) - len(pending)} already stored)"
            )
        
        outcomes = await asyncio.gather(
            *(self._acquire(key, first_urls[key]) for key in pending),
            return_exceptions=True
        )
        
        errors: Dict[str, Exception] = {}
        for key, outcome in zip(pending, outcomes):
            if isinstance(outcome, Exception):
                self.logger.debug(f"Store failed for {first_urls[key]}: {outcome}")
                self._failed.add(first_urls[key])
                errors[key] = outcome
        
        for key, group in groups.items():
            if key in errors:
                result.failures.extend(
                    TaskFailure(url=task.url, error=errors[key]) for task in group
                )
                continue
            
            record = self._records[key]
            result.records[key] = record
            
            for task in group:
                task.callback(record.local_ref)
        
        if errors:
            self.logger.warning(
                f"{len(errors)} of {len(groups)} resources could not be stored"
            )
        
        return result
    
    def _acquire(self, key: str, url: str) -> "asyncio.Future[ResourceRecord]":
        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._persist_one(key, url))
            self._inflight[key] = future
            future.add_done_callback(lambda _: self._inflight.pop(key, None))
        return future
    
    async def _persist_one(self, key: str, url: str) -> ResourceRecord:
        async with self._semaphore:
            local_ref = await self.persist(url)
        
        record = ResourceRecord(url=url, local_ref=local_ref)
        self._records[key] = record
        self._failed.discard(url)
        self.logger.debug(f"Stored: {url} -> {local_ref}")
        return record
    
    def reset(self) -> None:
        """Forget all records and failures."""
        self._records.clear()
        self._failed.clear()
