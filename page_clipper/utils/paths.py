"""
Path and URL utilities for the page clipper.

Provides URL resolution and normalization, asset path generation, and
file naming helpers.
"""

import os
import re
import hashlib
from typing import Optional
from urllib.parse import urlparse, urlunparse, urljoin, unquote


# Matches a data: URL, the only kind of reference that never needs fetching
DATA_URL_PATTERN = re.compile(r'^\s*data:', re.IGNORECASE)


def is_data_url(url: str) -> bool:
    """Check whether a reference is an inline data: URL."""
    return bool(url) and bool(DATA_URL_PATTERN.match(url))


def resolve_url(base_url: str, url: str) -> str:
    """
    Resolve a possibly relative reference against a base URL.
    
    Unlike normalize_url this keeps the reference intact (fragment, trailing
    slash) so it can be written back into markup.
    
    Args:
        base_url: URL of the document or stylesheet holding the reference
        url: Reference as written in the source
        
    Returns:
        Absolute URL string
    """
    return urljoin(base_url, url.strip())


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Normalize a URL by resolving relative paths and removing fragments.
    
    The result is used as a deduplication key, never written to markup.
    
    Args:
        url: URL to normalize
        base_url: Base URL for resolving relative URLs
        
    Returns:
        Normalized URL string, or "" for references that are not fetchable
    """
    if not url or url.startswith(('javascript:', 'data:', 'mailto:', 'tel:', '#')):
        return ""
    
    url = url.strip()
    
    # Handle protocol-relative URLs
    if url.startswith('//'):
        if base_url:
            parsed_base = urlparse(base_url)
            url = f"{parsed_base.scheme}:{url}"
        else:
            url = f"https:{url}"
    
    if base_url and not url.startswith(('http://', 'https://')):
        url = urljoin(base_url, url)
    
    parsed = urlparse(url)
    
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or '/',
        parsed.params,
        parsed.query,
        ''
    ))


def extract_extension_from_url(url: str) -> str:
    """
    Extract the file extension from a URL or quoted CSS reference.
    
    Quotes, query strings and fragments are ignored, so '"main.css#a"'
    yields 'css'.
    
    Args:
        url: URL or path, optionally wrapped in quotes
        
    Returns:
        Lowercase extension without the dot, or "" if there is none
    """
    cleaned = url.strip().strip('"\'')
    path = urlparse(cleaned).path or cleaned
    _, ext = os.path.splitext(os.path.basename(unquote(path)))
    return ext[1:].lower()


def get_asset_type(url: str) -> str:
    """
    Determine the asset type based on URL or file extension.
    
    Args:
        url: Asset URL
        
    Returns:
        Asset type string ('css', 'js', 'images', 'fonts', 'media', or 'other')
    """
    ext = extract_extension_from_url(url)
    
    if ext == 'css':
        return 'css'
    
    if ext in ('js', 'mjs'):
        return 'js'
    
    if ext in ('png', 'jpg', 'jpeg', 'gif', 'svg', 'webp', 'ico', 'bmp', 'avif'):
        return 'images'
    
    if ext in ('woff', 'woff2', 'ttf', 'otf', 'eot'):
        return 'fonts'
    
    if ext in ('mp4', 'webm', 'ogg', 'mp3', 'wav', 'm4a', 'm4v', 'avi', 'mov'):
        return 'media'
    
    return 'other'


def get_asset_path(url: str, asset_type: str, output_dir: str) -> str:
    """
    Generate a local path for an asset based on its type.
    
    Args:
        url: Asset URL
        asset_type: Type of asset ('css', 'js', 'images', 'fonts', 'media')
        output_dir: Base output directory
        
    Returns:
        Local file path for the asset
    """
    parsed = urlparse(url)
    path = unquote(parsed.path)
    
    filename = os.path.basename(path) or "asset"
    
    if '.' not in filename:
        ext_map = {
            'css': '.css',
            'js': '.js',
            'images': '.png',
            'fonts': '.woff2',
            'media': '.mp4'
        }
        filename += ext_map.get(asset_type, '')
    
    # The hash keeps same-named files from different URLs apart
    url_hash = hashlib.sha256(url.encode()).hexdigest()[:8]
    name, ext = os.path.splitext(filename)
    unique_filename = f"{name}_{url_hash}{ext}"
    
    unique_filename = re.sub(r'[<>:"|?*]', '_', unique_filename)
    
    return os.path.join(output_dir, "assets", asset_type, unique_filename)


def new_file_path(directory: str, title: str, extension: str = "html") -> str:
    """
    Build an absolute file path for a captured artifact.
    
    Args:
        directory: Target directory (relative paths resolve against cwd)
        title: File name without extension
        extension: File extension without the dot
        
    Returns:
        Absolute file path
    """
    filename = re.sub(r'[<>:"/\\|?*]', '_', title)
    return os.path.abspath(os.path.join(directory, f"{filename}.{extension}"))


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.
    
    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.
    
    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        ensure_dir(parent)


def get_relative_path(from_dir: str, to_path: str) -> str:
    """
    Calculate the relative path from a directory to a file.
    
    Args:
        from_dir: Directory the reference is relative to
        to_path: Target file path
        
    Returns:
        Relative path string with forward slashes
    """
    rel_path = os.path.relpath(to_path, from_dir)
    return rel_path.replace('\\', '/')
