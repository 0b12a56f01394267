"""
Utility modules for page capture.

Contains logging, URL/path handling, error types, and constants.
"""

from .log import setup_logger, get_logger
from .paths import normalize_url, resolve_url, is_data_url, get_asset_path, ensure_parent_dir
from .errors import ClipperError, FetchError, StoreError
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_CONCURRENCY,
    DOCTYPE,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "resolve_url",
    "is_data_url",
    "get_asset_path",
    "ensure_parent_dir",
    "ClipperError",
    "FetchError",
    "StoreError",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_CONCURRENCY",
    "DOCTYPE",
]
