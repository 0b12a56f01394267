"""
Capture module for page clipping.

Contains the document model, resource store, stylesheet pipeline and the
embedders that turn a loaded page into a self-contained artifact.
"""

from .document import DocumentModel, CaptureResult
from .selectors import ElementSelector, MarkerSelectors
from .store import ResourceStore, ResourceTask, ResourceRecord
from .fetch import HttpFetcher
from .downloader import AssetDownloader
from .resources import ResourceRewriter, ResourceReference
from .stylesheets import StylesheetPipeline, StyleSheetSource, StyleSheetEntry
from .data_urls import DataURLEmbedder, data_list_to_script_string
from .frames import FrameEmbedder, FrameCapture
from .shadow import ShadowDomOptimizer
from .video import VideoEmbedder, TweetMedia
from .restore import append_restore_script
from .session import CaptureSession, CaptureOptions

__all__ = [
    "DocumentModel",
    "CaptureResult",
    "ElementSelector",
    "MarkerSelectors",
    "ResourceStore",
    "ResourceTask",
    "ResourceRecord",
    "HttpFetcher",
    "AssetDownloader",
    "ResourceRewriter",
    "ResourceReference",
    "StylesheetPipeline",
    "StyleSheetSource",
    "StyleSheetEntry",
    "DataURLEmbedder",
    "data_list_to_script_string",
    "FrameEmbedder",
    "FrameCapture",
    "ShadowDomOptimizer",
    "VideoEmbedder",
    "TweetMedia",
    "append_restore_script",
    "CaptureSession",
    "CaptureOptions",
]
