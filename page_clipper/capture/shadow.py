"""
Shadow DOM optimizer.

Shadow trees are captured as markup in an attribute of their host. Their
style blocks go through the stylesheet pipeline like any other sheet.
"""

import asyncio
from typing import List

from bs4 import BeautifulSoup, Tag

from ..utils.log import get_logger
from ..utils.constants import ATTR_SHADOW_CONTENT
from .document import DocumentModel
from .selectors import MarkerSelectors
from .stylesheets import StylesheetPipeline


class ShadowDomOptimizer:
    """
    Optimizes the styles recorded in shadow placeholders.
    """
    
    def __init__(self, document: DocumentModel, pipeline: StylesheetPipeline):
        self.document = document
        self.pipeline = pipeline
        self.logger = get_logger("shadow")
    
    async def optimize(self) -> int:
        """
        Re-serialize every shadow placeholder with optimized styles.
        
        Placeholders are optimized concurrently; their attributes are only
        written once all of them are done.
        
        Returns:
            Number of placeholders rewritten
        """
        hosts: List[Tag] = [
            host for host in self.document.finder(MarkerSelectors.shadow_content())
            if host.get(ATTR_SHADOW_CONTENT)
        ]
        
        if not hosts:
            return 0
        
        contents = await asyncio.gather(*(self._optimize_host(host) for host in hosts))
        
        for host, content in zip(hosts, contents):
            host[ATTR_SHADOW_CONTENT] = content
        
        self.logger.debug(f"Optimized styles in {len(hosts)} shadow trees")
        
        return len(hosts)
    
    async def _optimize_host(self, host: Tag) -> str:
        shadow = BeautifulSoup(host[ATTR_SHADOW_CONTENT], 'html.parser')
        
        css_texts = []
        for el in shadow.find_all('style'):
            css_texts.append(el.get_text())
            el.decompose()
        
        optimized = await asyncio.gather(
            *(self.pipeline.optimize_css(text, self.document.url) for text in css_texts)
        )
        
        # gather keeps input order, so styles go back in document order
        self.document.append_style_sheets(optimized, root=shadow)
        
        return str(shadow)
