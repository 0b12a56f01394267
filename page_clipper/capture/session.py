"""
Capture session orchestrating the whole pipeline for one document.

Parses the page, runs plugins, inlines stylesheets, stores resources,
optimizes shadow trees, embeds frames and videos, appends the restore
script and serializes the result.
"""

import asyncio
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from bs4 import Tag

from .. import __version__
from ..utils.log import get_logger
from ..utils.constants import ATTR_STYLE, META_NAME
from .document import CaptureResult, DocumentModel
from .fetch import HttpFetcher
from .resources import ResourceRewriter
from .store import ResourceStore
from .stylesheets import StylesheetPipeline, StyleSheetEntry, StyleSheetSource
from .data_urls import DataURLEmbedder, embed_data_script
from .shadow import ShadowDomOptimizer
from .frames import FrameCapture, FrameEmbedder
from .video import MediaResolver, VideoEmbedder
from .restore import append_restore_script


@dataclass
class CaptureOptions:
    """Switches controlling one capture session."""
    
    # Record provenance only; fetch and rewrite nothing
    no_storing: bool = False
    
    # Replace <link rel=stylesheet> and <style> with optimized style blocks
    inline_stylesheets: bool = True
    
    # Embed assets referenced from stylesheets as data URLs
    embed_data_urls: bool = False
    
    # Crop the body to the first element matching this selector
    root_selector: Optional[str] = None
    
    run_plugins: bool = True


class CaptureSession:
    """
    One run of the capture pipeline against one document.
    """
    
    def __init__(
        self,
        html: str,
        url: str,
        fetcher: Optional[HttpFetcher] = None,
        store: Optional[ResourceStore] = None,
        media_resolver: Optional[MediaResolver] = None,
        options: Optional[CaptureOptions] = None
    ):
        """
        Initialize the capture session.
        
        Args:
            html: Markup of the loaded page
            url: URL of the page
            fetcher: Provides async fetch_text(url) and fetch_bytes(url)
            store: Resource store; required unless options.no_storing
            media_resolver: External lookup for tweet media URLs
            options: Session switches
        """
        self.options = options or CaptureOptions()
        self.fetcher = fetcher
        self.store = store
        self.media_resolver = media_resolver
        self.logger = get_logger("session")
        
        if self.store is None and not self.options.no_storing:
            raise ValueError("A ResourceStore is required unless no_storing is set")
        
        self.document = DocumentModel(html, url)
        
        # CSS assets are not stored in no_storing mode
        pipeline_store = None if self.options.no_storing else self.store
        self.pipeline = StylesheetPipeline(fetcher, pipeline_store)
    
    async def run(
        self,
        frames: Iterable[FrameCapture] = (),
        tweet_id: Optional[str] = None
    ) -> CaptureResult:
        """
        Run every pipeline step and serialize the document.
        
        Args:
            frames: Captures of nested frames to embed
            tweet_id: Tweet whose video thumbnails should become players
            
        Returns:
            CaptureResult with the final markup, rewritten references and
            per-resource failures
        """
        document = self.document
        self.logger.info(f"Capturing {document.url}")
        
        if self.options.run_plugins:
            document.exec_plugins()
        
        if self.options.root_selector:
            document.set_element_as_root(self.options.root_selector)
        
        if self.options.inline_stylesheets:
            entries = await self.inline_stylesheets()
            
            if self.options.embed_data_urls and entries and self.fetcher is not None:
                await self.embed_data_urls(entries)
        
        rewriter = ResourceRewriter(document, self.store)
        references = await rewriter.process_resources_in_attrs(
            no_storing=self.options.no_storing
        )
        
        await ShadowDomOptimizer(document, self.pipeline).optimize()
        
        FrameEmbedder(document).embed_iframe_contents(frames)
        
        if tweet_id and self.media_resolver is not None:
            await VideoEmbedder(document, self.media_resolver).embed_twitter_video(tweet_id)
        
        self._mark_document()
        append_restore_script(document)
        
        result = document.generate()
        result.references = references
        if rewriter.last_batch is not None:
            result.failures = list(rewriter.last_batch.failures)
        
        self.logger.info(
            f"Captured {document.url}: {len(references)} references, "
            f"{len(result.failures)} failed"
        )
        
        return result
    
    async def inline_stylesheets(self) -> List[Tuple[StyleSheetSource, StyleSheetEntry]]:
        """
        Replace each stylesheet element with an optimized style block.
        
        The new block takes the element's place, so cascade order is kept.
        Sheets that cannot be loaded keep their original element.
        
        Returns:
            (source, entry) pairs of the sheets that were inlined
        """
        sheets = self.pipeline.collect_document_sheets(self.document)
        
        results = await asyncio.gather(
            *(self._load_sheet(source) for _, source in sheets),
            return_exceptions=True
        )
        
        inlined = []
        for (el, source), result in zip(sheets, results):
            if isinstance(result, Exception):
                self.logger.warning(f"Keeping stylesheet {source.url} as is: {result}")
                continue
            
            el.replace_with(self._style_for(el, result.optimized_text))
            inlined.append((source, result))
        
        self.logger.debug(f"Inlined {len(inlined)} of {len(sheets)} stylesheets")
        
        return inlined
    
    async def _load_sheet(self, source: StyleSheetSource) -> StyleSheetEntry:
        entry = await self.pipeline.load_entry(source)
        entry.optimized_text = await self.pipeline.optimize_css(entry.optimized_text, source.url)
        return entry
    
    def _style_for(self, el: Tag, text: str) -> Tag:
        attrs = {ATTR_STYLE: ''}
        media = el.get('media')
        if media:
            attrs['media'] = media
        
        style = self.document.new_tag('style', attrs)
        style.string = text
        return style
    
    async def embed_data_urls(self, entries: List[Tuple[StyleSheetSource, StyleSheetEntry]]) -> None:
        """
        Embed the assets referenced by inlined sheets as data URLs.
        
        Args:
            entries: Result of inline_stylesheets
        """
        url_sets = [
            self.pipeline.source_urls(entry.raw_text, source.url)
            for source, entry in entries
        ]
        
        embedder = DataURLEmbedder(self.fetcher)
        data_list = await embedder.data_source_urls_to_data_list(url_sets, self.document.url)
        
        embed_data_script(
            self.document,
            data_list,
            [entry.raw_text for _, entry in entries]
        )
    
    def _mark_document(self) -> None:
        if self.document.meta_element is not None:
            return
        
        meta = self.document.new_tag('meta', {'name': META_NAME, 'content': __version__})
        self.document.head.insert(0, meta)
