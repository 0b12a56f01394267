"""
Asset downloader providing the default persist capability.

Saves each resource under the output directory, grouped by asset type, and
returns a path relative to the directory the artifact will live in.
"""

import os
from typing import Optional

from ..utils.log import get_logger
from ..utils.errors import StoreError
from ..utils.paths import get_asset_path, get_asset_type, ensure_parent_dir, get_relative_path
from .fetch import HttpFetcher


class AssetDownloader:
    """
    Downloads assets and writes them to disk.
    
    The fetcher is shared with the rest of the session so one HTTP session
    serves every request.
    """
    
    def __init__(
        self,
        output_dir: str,
        fetcher: HttpFetcher,
        base_dir: Optional[str] = None
    ):
        """
        Initialize the asset downloader.
        
        Args:
            output_dir: Base output directory for saving assets
            fetcher: Fetcher used to retrieve asset bytes
            base_dir: Directory local references are relative to
                      (defaults to output_dir)
        """
        self.output_dir = os.path.abspath(output_dir)
        self.base_dir = os.path.abspath(base_dir) if base_dir else self.output_dir
        self.fetcher = fetcher
        self.logger = get_logger("downloader")
    
    async def persist(self, url: str) -> str:
        """
        Download one asset and save it.
        
        Args:
            url: Absolute asset URL
            
        Returns:
            Local reference relative to base_dir
            
        Raises:
            FetchError: If the asset cannot be downloaded
            StoreError: If the asset cannot be written
        """
        content = await self.fetcher.fetch_bytes(url)
        
        asset_type = get_asset_type(url)
        local_path = get_asset_path(url, asset_type, self.output_dir)
        
        try:
            ensure_parent_dir(local_path)
            with open(local_path, 'wb') as f:
                f.write(content)
        except OSError as e:
            raise StoreError(url, str(e)) from e
        
        self.logger.debug(f"Downloaded: {url} -> {local_path}")
        
        return get_relative_path(self.base_dir, local_path)
    
    def save_page(self, html: str, local_path: str) -> str:
        """
        Write a generated document to disk.
        
        Args:
            html: Serialized document
            local_path: Target file path
            
        Returns:
            The path written
            
        Raises:
            StoreError: If the file cannot be written
        """
        try:
            ensure_parent_dir(local_path)
            with open(local_path, 'w', encoding='utf-8') as f:
                f.write(html)
        except OSError as e:
            raise StoreError(local_path, str(e)) from e
        
        self.logger.debug(f"Saved page: {local_path}")
        return local_path
