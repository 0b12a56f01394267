import os

import pytest

from page_clipper.capture.downloader import AssetDownloader
from page_clipper.utils.errors import FetchError, StoreError

from .conftest import FakeFetcher


ICON_URL = 'https://example.com/img/icon.png'


async def test_persist_writes_asset(tmp_path):
    downloader = AssetDownloader(str(tmp_path), FakeFetcher({ICON_URL: b'png-bytes'}))
    
    local_ref = await downloader.persist(ICON_URL)
    
    assert local_ref.startswith('assets/images/icon_')
    assert local_ref.endswith('.png')
    with open(tmp_path / local_ref, 'rb') as f:
        assert f.read() == b'png-bytes'


async def test_persist_relative_to_base_dir(tmp_path):
    pages = tmp_path / 'pages'
    downloader = AssetDownloader(str(tmp_path), FakeFetcher({ICON_URL: b'x'}), base_dir=str(pages))
    
    local_ref = await downloader.persist(ICON_URL)
    
    assert local_ref.startswith('../assets/images/')


async def test_persist_propagates_fetch_error(tmp_path):
    downloader = AssetDownloader(str(tmp_path), FakeFetcher())
    
    with pytest.raises(FetchError):
        await downloader.persist(ICON_URL)


async def test_persist_wraps_os_errors(tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')
    downloader = AssetDownloader(str(blocker), FakeFetcher({ICON_URL: b'x'}))
    
    with pytest.raises(StoreError):
        await downloader.persist(ICON_URL)


def test_save_page(tmp_path):
    downloader = AssetDownloader(str(tmp_path), FakeFetcher())
    target = os.path.join(str(tmp_path), 'pages', 'title.html')
    
    assert downloader.save_page('<!DOCTYPE html>\n<p>x</p>', target) == target
    with open(target, encoding='utf-8') as f:
        assert f.read() == '<!DOCTYPE html>\n<p>x</p>'
