"""
Page Clipper - capture a loaded web page as a single self-contained artifact.

This package rewrites a captured document so every subresource points at a
locally stored copy, inlines stylesheets, embeds nested frames and shadow
trees, and appends the bootstrap script needed to restore them on reload.
"""

__version__ = "1.0.0"
__author__ = "Page Clipper Team"
