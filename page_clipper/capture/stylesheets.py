"""
Stylesheet pipeline: extraction, minification and reference rewriting.

Minifies with rcssmin. Linked sheets resolve their url() and @import references
against the sheet's own URL, inline blocks against the page.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import rcssmin
from bs4 import Tag

from ..utils.log import get_logger
from ..utils.paths import is_data_url, resolve_url
from ..utils.constants import ATTR_STYLE
from .selectors import ElementSelector
from .store import ResourceStore, ResourceTask


# url(...) in its double-quoted, single-quoted or bare form, and the string
# form of @import; exactly one named group holds the reference
CSS_URL_PATTERN = re.compile(
    r'url\(\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\'|(?P<bare>[^"\'()\s]+))\s*\)'
    r'|@import\s+(?:"(?P<import_dq>[^"]*)"|\'(?P<import_sq>[^\']*)\')',
    re.IGNORECASE
)

REF_GROUPS = ('dq', 'sq', 'bare', 'import_dq', 'import_sq')

logger = get_logger("stylesheets")


@dataclass
class StyleSheetSource:
    """Where a stylesheet's text comes from."""
    
    # 'text' for an inline block, 'link' for a linked sheet
    type: str
    
    # Page URL for inline blocks, sheet URL for linked ones
    url: str
    
    text: Optional[str] = None
    
    @property
    def is_inline(self) -> bool:
        return self.type == 'text'


@dataclass
class StyleSheetEntry:
    """An extracted stylesheet and its optimized form."""
    
    source_url: Optional[str]
    raw_text: str
    optimized_text: str = ''


def minify_css(text: str) -> str:
    """
    Minify CSS text.
    
    Minification is best-effort; on failure the text is returned as is.
    """
    try:
        return rcssmin.cssmin(text)
    except Exception as e:
        logger.debug(f"CSS minification failed: {e}")
        return text


def _ref_group(match) -> str:
    for name in REF_GROUPS:
        if match.group(name) is not None:
            return name
    raise ValueError(f"No reference in {match.group(0)!r}")


def is_external_ref(ref: str) -> bool:
    """
    Whether a CSS reference points at a separate resource.
    
    Data URLs are self-contained and fragment-only references (SVG filters,
    gradients, markers) point into the document itself.
    """
    return bool(ref) and not ref.startswith('#') and not is_data_url(ref)


def iter_css_urls(css: str):
    """Yield (match, group, reference) for every external reference in CSS text."""
    for match in CSS_URL_PATTERN.finditer(css):
        group = _ref_group(match)
        ref = match.group(group).strip()
        if is_external_ref(ref):
            yield match, group, ref


def rewrite_css_urls(
    css: str,
    base_url: str,
    mapping: Optional[Dict[str, str]] = None
) -> str:
    """
    Rewrite url() and @import references in CSS.
    
    Each external reference becomes its absolute form against base_url, or
    the mapped value when the absolute URL is in mapping. Quotes and the
    surrounding syntax are preserved; data URLs and fragment-only references
    are left alone.
    
    Args:
        css: CSS content
        base_url: URL the references resolve against
        mapping: Optional absolute URL -> replacement mapping
        
    Returns:
        CSS with rewritten URLs
    """
    def replace_url(match):
        group = _ref_group(match)
        ref = match.group(group).strip()
        
        if not is_external_ref(ref):
            return match.group(0)
        
        url = resolve_url(base_url, ref)
        if mapping and url in mapping:
            url = mapping[url]
        
        whole = match.group(0)
        start = match.start(group) - match.start(0)
        end = match.end(group) - match.start(0)
        return whole[:start] + url + whole[end:]
    
    return CSS_URL_PATTERN.sub(replace_url, css)


class StylesheetPipeline:
    """
    Obtains, minifies and rewrites stylesheets.
    
    With a store attached, optimize_css also persists every asset a sheet
    references and points the sheet at the stored copies.
    """
    
    SHEET_SELECTORS = (
        ElementSelector('link[rel~=stylesheet][href]'),
        ElementSelector('style', exclude=(f'[{ATTR_STYLE}]',)),
    )
    
    def __init__(self, fetcher=None, store: Optional[ResourceStore] = None):
        """
        Initialize the pipeline.
        
        Args:
            fetcher: Object with an async fetch_text(url) method
            store: Optional store for assets referenced from CSS
        """
        self.fetcher = fetcher
        self.store = store
        self.logger = logger
    
    def extract_inline(self, text: str) -> str:
        """Minify an inline style block."""
        return minify_css(text)
    
    async def extract_linked(self, url: str) -> str:
        """
        Fetch and minify a linked stylesheet.
        
        Relative url() references are made absolute against the sheet URL.
        
        Raises:
            FetchError: If the sheet cannot be fetched
        """
        entry = await self.load_entry(StyleSheetSource(type='link', url=url))
        return entry.optimized_text
    
    async def load_entry(self, source: StyleSheetSource) -> StyleSheetEntry:
        """
        Obtain and minify one stylesheet.
        
        Raises:
            FetchError: If a linked sheet cannot be fetched
            ValueError: If a linked sheet is given but no fetcher is set
        """
        if source.is_inline:
            raw = source.text or ''
            return StyleSheetEntry(None, raw, self.extract_inline(raw))
        
        if self.fetcher is None:
            raise ValueError("A fetcher is required for linked stylesheets")
        
        raw = await self.fetcher.fetch_text(source.url)
        return StyleSheetEntry(source.url, raw, rewrite_css_urls(minify_css(raw), source.url))
    
    async def extract_entries(self, sources: List[StyleSheetSource]) -> List[StyleSheetEntry]:
        """
        Extract every source into a StyleSheetEntry, in input order.
        
        Sheets are independent: one failing sheet is logged and left out
        without affecting the others.
        """
        results = await asyncio.gather(
            *(self.load_entry(source) for source in sources),
            return_exceptions=True
        )
        
        entries = []
        for source, result in zip(sources, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Skipping stylesheet {source.url}: {result}")
                continue
            
            entries.append(result)
        
        return entries
    
    async def extract_or_fetch_css(self, sources: List[StyleSheetSource]) -> List[str]:
        """
        Extract the minified text of every source, in input order.
        
        Args:
            sources: Inline and linked stylesheet sources
            
        Returns:
            Minified CSS texts of the sheets that could be obtained
        """
        entries = await self.extract_entries(sources)
        return [entry.optimized_text for entry in entries]
    
    def source_urls(self, text: str, base_url: str) -> List[str]:
        """
        List the absolute asset URLs a stylesheet references.
        
        Args:
            text: CSS text
            base_url: URL the references resolve against
            
        Returns:
            Unique absolute URLs in order of first appearance
        """
        urls = {}
        for _, _, ref in iter_css_urls(text):
            urls.setdefault(resolve_url(base_url, ref), None)
        return list(urls)
    
    async def optimize_css(self, text: str, url: str) -> str:
        """
        Minify CSS and resolve its url() references.
        
        Args:
            text: CSS text
            url: URL the references resolve against
            
        Returns:
            Optimized CSS; references point at stored copies when a store is
            attached and the asset could be stored, otherwise at the absolute
            URL
        """
        minified = minify_css(text)
        
        mapping: Dict[str, str] = {}
        
        if self.store is not None:
            tasks = [
                ResourceTask(url=asset_url, callback=self._mapper(mapping, asset_url))
                for asset_url in self.source_urls(minified, url)
            ]
            if tasks:
                await self.store.batch_save(tasks)
        
        return rewrite_css_urls(minified, url, mapping)
    
    @staticmethod
    def _mapper(mapping: Dict[str, str], url: str):
        def callback(local_ref: str) -> None:
            mapping[url] = local_ref
        return callback
    
    def collect_document_sheets(self, document) -> List[Tuple[Tag, StyleSheetSource]]:
        """
        Find every stylesheet of a document in document order.
        
        Style blocks already produced by the pipeline are not collected
        again.
        
        Args:
            document: DocumentModel to scan
            
        Returns:
            (element, source) pairs
        """
        sheets = []
        
        for el in document.finder(*self.SHEET_SELECTORS):
            if el.name == 'link':
                href = el.get('href', '').strip()
                if not href or is_data_url(href):
                    continue
                source = StyleSheetSource(type='link', url=resolve_url(document.url, href))
            else:
                source = StyleSheetSource(type='text', url=document.url, text=el.get_text())
            
            sheets.append((el, source))
        
        return sheets
