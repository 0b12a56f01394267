"""
Shared fixtures: in-memory stand-ins for the fetch and persist capabilities.
"""

import asyncio

import pytest

from page_clipper.capture.document import DocumentModel
from page_clipper.capture.store import ResourceStore
from page_clipper.utils.errors import FetchError, StoreError


PAGE_URL = 'https://example.com/articles/page.html'


class FakeFetcher:
    """Serves a fixed mapping of URL -> content and records requests."""
    
    def __init__(self, resources=None):
        self.resources = dict(resources or {})
        self.requests = []
    
    async def fetch_bytes(self, url):
        self.requests.append(url)
        await asyncio.sleep(0)
        if url not in self.resources:
            raise FetchError(url, 'not found', status=404)
        content = self.resources[url]
        return content.encode('utf-8') if isinstance(content, str) else content
    
    async def fetch_text(self, url):
        return (await self.fetch_bytes(url)).decode('utf-8')


class FakePersister:
    """persist(url) capability returning 'resources/<basename>'."""
    
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []
    
    async def __call__(self, url):
        self.calls.append(url)
        await asyncio.sleep(0)
        if url in self.fail:
            raise StoreError(url, 'disk full')
        return 'resources/' + url.rstrip('/').rsplit('/', 1)[-1]


@pytest.fixture
def persister():
    return FakePersister()


@pytest.fixture
def store(persister):
    return ResourceStore(persister)


@pytest.fixture
def make_document():
    def factory(body, head='', url=PAGE_URL):
        return DocumentModel(
            f'<html><head>{head}</head><body>{body}</body></html>',
            url
        )
    return factory
