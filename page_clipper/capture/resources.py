"""
Resource rewriter for pointing element attributes at stored copies.

Records each original reference in a provenance attribute, then queues the
resolved URL into the resource store and rewrites the live attribute once
the store hands back a local reference.
"""

from dataclasses import dataclass
from typing import List, Optional

from bs4 import Tag

from ..utils.log import get_logger
from ..utils.paths import is_data_url, resolve_url
from ..utils.constants import ATTR_SRC, ATTR_HREF
from .document import DocumentModel
from .selectors import ElementSelector
from .store import ResourceStore, ResourceTask, BatchResult


@dataclass
class ResourceReference:
    """One rewritten reference: the value found and the value now live."""
    
    element: Tag
    attribute: str
    original: str
    current: str
    
    @property
    def rewritten(self) -> bool:
        return self.current != self.original
    
    def set(self, value: str) -> None:
        """Write a new live value to the element."""
        self.current = value
        self.element[self.attribute] = value


class ResourceRewriter:
    """
    Rewrites src/href attributes of a document to local references.
    """
    
    SRC_SELECTOR = ElementSelector('[src]', exclude=('[src=""]', 'iframe'))
    
    HREF_SELECTOR = ElementSelector(
        '[href]',
        exclude=(
            '[href=""]',
            'a',
            'div',
            '[rel~=alternate]',
            '[rel~=canonical]',
            '[rel~=prev]',
            '[rel~=next]',
        )
    )
    
    # (live attribute, provenance attribute, selector)
    TARGETS = (
        ('src', ATTR_SRC, SRC_SELECTOR),
        ('href', ATTR_HREF, HREF_SELECTOR),
    )
    
    def __init__(self, document: DocumentModel, store: Optional[ResourceStore] = None):
        """
        Initialize the resource rewriter.
        
        Args:
            document: Document to rewrite in place
            store: Store that persists resources (unused with no_storing)
        """
        self.document = document
        self.store = store
        self.logger = get_logger("rewriter")
        self.last_batch: Optional[BatchResult] = None
    
    async def process_resources_in_attrs(
        self,
        no_storing: bool = False
    ) -> List[ResourceReference]:
        """
        Record provenance and rewrite every resource attribute.
        
        Args:
            no_storing: Only record provenance; fetch and rewrite nothing
            
        Returns:
            The references found, with their current values once the batch
            has settled
        """
        if not no_storing and self.store is None:
            raise ValueError("A ResourceStore is required unless no_storing is set")
        
        references: List[ResourceReference] = []
        tasks: List[ResourceTask] = []
        
        for attr, provenance_attr, selector in self.TARGETS:
            for el in self.document.finder(selector):
                if attr == 'src' and el.has_attr('srcset'):
                    del el['srcset']
                
                ref = self._process(el, attr, provenance_attr, no_storing, tasks)
                if ref is not None:
                    references.append(ref)
        
        if tasks:
            self.last_batch = await self.store.batch_save(tasks)
        
        self.logger.debug(
            f"Processed {len(references)} references, queued {len(tasks)} tasks"
        )
        
        return references
    
    def _process(
        self,
        el: Tag,
        attr: str,
        provenance_attr: str,
        no_storing: bool,
        tasks: List[ResourceTask]
    ) -> Optional[ResourceReference]:
        original = el.get(attr, '').strip()
        
        if not original or is_data_url(original):
            return None
        
        # Already handled by an earlier pass
        if el.has_attr(provenance_attr):
            return None
        
        el[provenance_attr] = original
        ref = ResourceReference(element=el, attribute=attr, original=original, current=original)
        
        if no_storing:
            return ref
        
        url = resolve_url(self.document.url, original)
        
        # A failed store leaves the absolute URL as a live external reference
        ref.set(url)
        tasks.append(ResourceTask(url=url, callback=ref.set))
        
        return ref
