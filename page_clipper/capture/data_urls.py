"""
Data URL embedder.

Turns assets referenced by stylesheets into base64 data URLs and generates
the script literal that ships them inside the artifact.
"""

import asyncio
import base64
import json
import mimetypes
from typing import Iterable, List, Sequence, Tuple
from urllib.parse import urlparse

from ..utils.log import get_logger
from ..utils.paths import extract_extension_from_url, resolve_url
from ..utils.constants import ATTR_DATA_SCRIPT
from .selectors import MarkerSelectors


DataListEntry = Tuple[str, str]

DEFAULT_MEDIA_TYPE = 'application/octet-stream'

# Types the platform mimetypes table may not know
FALLBACK_MEDIA_TYPES = {
    'woff2': 'font/woff2',
    'woff': 'font/woff',
    'ttf': 'font/ttf',
    'otf': 'font/otf',
    'eot': 'application/vnd.ms-fontobject',
    'svg': 'image/svg+xml',
    'webp': 'image/webp',
    'avif': 'image/avif',
}

# Resolves original URLs to embedded data at load time
BOOTSTRAP_TEMPLATE = """
;(function () {
    var dataMap = new Map(dataList);
    window.pageClipperData = {
        cssTexts: cssTexts,
        resolve: function (url) {
            return dataMap.has(url) ? dataMap.get(url) : url;
        },
    };
})();
"""

logger = get_logger("data_urls")


def guess_media_type(url: str) -> str:
    """Media type of a resource judged from its URL path."""
    media_type, _ = mimetypes.guess_type(urlparse(url).path)
    if media_type:
        return media_type
    return FALLBACK_MEDIA_TYPES.get(extract_extension_from_url(url), DEFAULT_MEDIA_TYPE)


def to_data_url(content: bytes, media_type: str) -> str:
    """Encode bytes as a base64 data URL."""
    encoded = base64.b64encode(content).decode('ascii')
    return f"data:{media_type};base64,{encoded}"


def _js_literal(value) -> str:
    # JSON is valid JS; escaping "</" keeps a literal from closing its <script>
    return json.dumps(value, separators=(',', ':')).replace('</', '<\\/')


def data_list_to_script_string(
    data_list: Sequence[DataListEntry],
    css_texts: Sequence[str]
) -> str:
    """
    Serialize a data list and CSS texts as JS array literals.
    
    Args:
        data_list: (url, data_url) pairs
        css_texts: Raw CSS texts parallel to the embedding
        
    Returns:
        'const dataList = [...];\\nconst cssTexts = [...];'
    """
    entries = _js_literal([[url, data_url] for url, data_url in data_list])
    texts = '[' + ','.join(_js_literal(text) for text in css_texts) + ']'
    return f"const dataList = {entries};\nconst cssTexts = {texts};"


def build_bootstrap_script(
    data_list: Sequence[DataListEntry],
    css_texts: Sequence[str]
) -> str:
    """Data literals followed by the lookup bootstrap."""
    return data_list_to_script_string(data_list, css_texts) + BOOTSTRAP_TEMPLATE


def embed_data_script(
    document,
    data_list: Sequence[DataListEntry],
    css_texts: Sequence[str]
):
    """
    Append the data bootstrap to the document head, at most once.
    
    Returns:
        The script element (the existing one if already embedded)
    """
    existing = document.find_one(MarkerSelectors.data_script())
    if existing is not None:
        return existing
    
    script = document.new_tag('script', {ATTR_DATA_SCRIPT: ''})
    script.string = build_bootstrap_script(data_list, css_texts)
    document.head.append(script)
    return script


class DataURLEmbedder:
    """
    Fetches assets and encodes them as data URLs.
    """
    
    def __init__(self, fetcher):
        """
        Initialize the embedder.
        
        Args:
            fetcher: Object with an async fetch_bytes(url) method
        """
        self.fetcher = fetcher
        self.logger = logger
    
    async def _fetch_data_url(self, url: str) -> str:
        content = await self.fetcher.fetch_bytes(url)
        return to_data_url(content, guess_media_type(url))
    
    async def data_source_urls_to_data_list(
        self,
        url_sets: Iterable[Iterable[str]],
        page_url: str
    ) -> List[DataListEntry]:
        """
        Build one data list entry per unique URL across all sets.
        
        Args:
            url_sets: One set of source URLs per logical group (stylesheet)
            page_url: URL relative references resolve against
            
        Returns:
            (url, data_url) pairs in order of first appearance; URLs that
            fail to fetch are left out
        """
        urls = {}
        for url_set in url_sets:
            for url in url_set:
                urls.setdefault(resolve_url(page_url, url), None)
        
        unique = list(urls)
        results = await asyncio.gather(
            *(self._fetch_data_url(url) for url in unique),
            return_exceptions=True
        )
        
        data_list = []
        for url, result in zip(unique, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Cannot embed {url}: {result}")
                continue
            data_list.append((url, result))
        
        self.logger.debug(f"Embedded {len(data_list)} of {len(unique)} assets")
        
        return data_list
