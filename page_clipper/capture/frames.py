"""
Frame embedder for splicing captured nested documents into their frames.
"""

from dataclasses import dataclass
from typing import Iterable, List

from bs4 import Tag

from ..utils.log import get_logger
from ..utils.constants import ATTR_IFRAME_UUID, ATTR_SRC
from .document import DocumentModel
from .selectors import MarkerSelectors


@dataclass
class FrameCapture:
    """Markup of a nested document captured in an earlier, separate pass."""
    
    uuid: str
    html: str


class FrameEmbedder:
    """
    Moves captured frame documents into srcdoc of their placeholders.
    """
    
    def __init__(self, document: DocumentModel):
        self.document = document
        self.logger = get_logger("frames")
    
    def embed_iframe_contents(self, captures: Iterable[FrameCapture]) -> List[Tag]:
        """
        Embed each capture into the placeholder carrying its uuid.
        
        The live src moves to the provenance attribute so the browser does
        not load the frame. Captures without a placeholder are skipped.
        
        Args:
            captures: Frame captures to embed
            
        Returns:
            The placeholders that received content
        """
        embedded = []
        
        for capture in captures:
            frame = self.document.find_one(MarkerSelectors.iframe_uuid(capture.uuid))
            
            if frame is None:
                self.logger.debug(f"No placeholder for frame {capture.uuid}, skipping")
                continue
            
            del frame[ATTR_IFRAME_UUID]
            frame['srcdoc'] = capture.html
            if frame.has_attr('src'):
                frame[ATTR_SRC] = frame['src']
                del frame['src']
            
            embedded.append(frame)
        
        return embedded
