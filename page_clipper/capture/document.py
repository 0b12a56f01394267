"""
Document model wrapping one parsed page.

Uses BeautifulSoup for parsing, selection and in-place mutation, and
minify-html for the final serialization.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional

import minify_html
from bs4 import BeautifulSoup, Tag
from bs4.element import Doctype

from ..plugins import exec_plugins as run_plugins
from ..utils.log import get_logger
from ..utils.constants import DOCTYPE, ATTR_STYLE, META_NAME
from .selectors import MarkerSelectors, selectors_to_string
from .store import TaskFailure

if TYPE_CHECKING:
    from .resources import ResourceReference


@dataclass
class CaptureResult:
    """Serialized artifact produced by one capture session."""
    
    url: str
    html: str
    
    # (original, current) pairs for every rewritten reference
    references: List["ResourceReference"] = field(default_factory=list)
    
    # Per-task failures reported by the resource store
    failures: List[TaskFailure] = field(default_factory=list)


class DocumentModel:
    """
    A parsed document tree plus the base URL its references resolve against.
    
    Every pipeline component mutates the same tree in place; nothing here
    makes copies.
    """
    
    doctype = DOCTYPE
    
    def __init__(self, html: str, url: str, parser: str = 'lxml'):
        """
        Parse markup into a document tree.
        
        Args:
            html: Raw markup of the page
            url: Base URL used to resolve relative references
            parser: BeautifulSoup tree builder to try first
        """
        self.url = url
        self.logger = get_logger("document")
        
        try:
            self.soup = BeautifulSoup(html, parser)
        except Exception:
            # Fallback to html.parser if lxml is missing or chokes
            self.soup = BeautifulSoup(html, 'html.parser')
        
        self._ensure_structure()
    
    def _ensure_structure(self) -> None:
        """Guarantee html, head and body elements exist."""
        soup = self.soup
        
        root = soup.find('html')
        if root is None:
            root = soup.new_tag('html')
            for child in list(soup.contents):
                if not isinstance(child, Doctype):
                    root.append(child.extract())
            soup.append(root)
        
        if soup.head is None:
            root.insert(0, soup.new_tag('head'))
        
        if soup.body is None:
            body = soup.new_tag('body')
            for child in list(root.contents):
                if child is not soup.head:
                    body.append(child.extract())
            root.append(body)
    
    @property
    def root(self) -> Tag:
        return self.soup.find('html')
    
    @property
    def head(self) -> Tag:
        return self.soup.head
    
    @property
    def body(self) -> Tag:
        return self.soup.body
    
    @property
    def meta_element(self) -> Optional[Tag]:
        """The marker <meta> left by a previous capture, if any."""
        return self.soup.select_one(f'meta[name="{META_NAME}"]')
    
    def finder(self, *selectors) -> List[Tag]:
        """
        Select elements matching the union of the given selectors.
        
        Args:
            selectors: ElementSelector instances or CSS strings
            
        Returns:
            Matching elements in document order
        """
        if not selectors:
            return []
        return self.soup.select(selectors_to_string(*selectors))
    
    def find_one(self, *selectors) -> Optional[Tag]:
        """Return the first element matching any of the selectors."""
        found = self.finder(*selectors)
        return found[0] if found else None
    
    def new_tag(self, name: str, attrs: Optional[dict] = None) -> Tag:
        """Create a detached element owned by this document."""
        return self.soup.new_tag(name, attrs=attrs or {})
    
    def serialize(self) -> str:
        """Doctype plus the unminified markup of the root element."""
        return f"{self.doctype}\n{self.root}"
    
    def generate(self) -> CaptureResult:
        """
        Serialize the document, minifying markup, CSS and JS.
        
        Minification is best-effort: any failure falls back to the
        unminified markup.
        
        Returns:
            CaptureResult holding the document URL and final markup
        """
        markup = str(self.root)
        
        try:
            minified = minify_html.minify(markup, minify_css=True, minify_js=True)
            html = f"{self.doctype}\n{minified}"
        except Exception as e:
            self.logger.debug(f"Minification failed, keeping raw markup: {e}")
            html = f"{self.doctype}\n{markup}"
        
        return CaptureResult(url=self.url, html=html)
    
    def exec_plugins(self) -> None:
        """Run every registered plugin against this document."""
        run_plugins(self)
    
    def set_element_as_root(self, selector: str) -> bool:
        """
        Crop the body down to the first element matching a selector.
        
        Args:
            selector: CSS selector evaluated inside <body>
            
        Returns:
            True if an element matched and the body was replaced
        """
        el = self.body.select_one(selector)
        if el is None:
            self.logger.debug(f"No element matches {selector}, keeping full body")
            return False
        
        el.extract()
        self.body.clear()
        self.body.append(el)
        return True
    
    def get_iframes(self) -> List[Tag]:
        """Frame placeholders still waiting for their captured content."""
        return self.finder(MarkerSelectors.iframe_uuid())
    
    def append_style_sheets(
        self,
        css_texts: Iterable[str],
        root: Optional[Tag] = None
    ) -> List[Tag]:
        """
        Append one marked <style> element per CSS text.
        
        Args:
            css_texts: Stylesheet texts in the order they must apply
            root: Container to append to (defaults to <head>)
            
        Returns:
            The created style elements
        """
        target = root if root is not None else self.head
        elements = []
        
        for text in css_texts:
            el = self.new_tag('style', {ATTR_STYLE: ''})
            el.string = text
            target.append(el)
            elements.append(el)
        
        return elements
