"""
HTTP fetcher providing the text and binary retrieval capabilities.

Uses a single aiohttp session per fetcher; every failure surfaces as a
FetchError.
"""

import asyncio
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..utils.log import get_logger
from ..utils.errors import FetchError
from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


class HttpFetcher:
    """
    Retrieves resources over HTTP.
    
    Can be used as an async context manager; otherwise the session is opened
    on first use and must be released with close().
    """
    
    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the fetcher.
        
        Args:
            timeout: Request timeout in seconds
            user_agent: User agent string for requests
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.logger = get_logger("fetcher")
        
        self._session: Optional[aiohttp.ClientSession] = None
    
    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )
        return self._session
    
    async def fetch_bytes(self, url: str) -> bytes:
        """
        Download the raw body of a resource.
        
        Args:
            url: Absolute URL to fetch
            
        Returns:
            Response body
            
        Raises:
            FetchError: On non-200 status, client errors or timeout
        """
        session = self._get_session()
        
        try:
            async with session.get(url, allow_redirects=True) as response:
                if response.status != 200:
                    raise FetchError(url, "unexpected status", status=response.status)
                
                content = await response.read()
                self.logger.debug(f"Fetched {len(content)} bytes: {url}")
                return content
                
        except ClientError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise FetchError(url, "timeout") from e
    
    async def fetch_text(self, url: str) -> str:
        """
        Download a resource and decode it as UTF-8 text.
        
        Args:
            url: Absolute URL to fetch
            
        Returns:
            Decoded response body (undecodable bytes are dropped)
            
        Raises:
            FetchError: On non-200 status, client errors or timeout
        """
        content = await self.fetch_bytes(url)
        return content.decode('utf-8', errors='ignore')
    
    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
    
    async def __aenter__(self):
        """Async context manager entry."""
        self._get_session()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
