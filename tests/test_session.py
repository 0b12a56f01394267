import base64

import pytest
from bs4 import BeautifulSoup

from page_clipper import plugins
from page_clipper.capture.frames import FrameCapture
from page_clipper.capture.session import CaptureOptions, CaptureSession
from page_clipper.capture.resources import ResourceReference
from page_clipper.capture.store import ResourceStore, TaskFailure
from page_clipper.capture.stylesheets import minify_css
from page_clipper.capture.video import TweetMedia
from page_clipper.utils.constants import (
    ATTR_DATA_SCRIPT,
    ATTR_HREF,
    ATTR_SCRIPT,
    ATTR_SHADOW_CONTENT,
    ATTR_SRC,
    ATTR_STYLE,
    ATTR_VIDEO,
)

from .conftest import FakeFetcher, FakePersister


PAGE_URL = 'https://example.com/status/42'
CSS_URL = 'https://example.com/css/main.css'
ICON_URL = 'https://example.com/icon.png'
ICON_BYTES = b'icon-bytes'

MAIN_CSS = '.logo { background: url(/icon.png); }'

PAGE = f"""<!DOCTYPE html>
<html>
<head>
    <title>Capture</title>
    <link rel="stylesheet" href="/css/main.css" media="screen">
    <link rel="stylesheet" href="/css/missing.css">
    <link rel="canonical" href="{PAGE_URL}">
    <style>.inline {{ color: red; }}</style>
</head>
<body>
    <header id="nav">navigation</header>
    <article id="tweet">
        <img id="logo" src="/icon.png" srcset="/icon@2x.png 2x">
        <img id="broken" src="/broken.png">
        <iframe id="frame" data-page-clipper-iframe-uuid="f-1" src="https://embed.example.com/x"></iframe>
        <div id="host" {ATTR_SHADOW_CONTENT}="&lt;style&gt;.s {{ color: blue; }}&lt;/style&gt;&lt;b&gt;shadow&lt;/b&gt;"></div>
        <div><div class="player"><div><div>
            <img src="https://pbs.twimg.com/tweet_video_thumb/abc.jpg">
        </div></div></div></div>
    </article>
</body>
</html>
"""


@pytest.fixture(autouse=True)
def clean_registry():
    plugins.clear_plugins()
    yield
    plugins.clear_plugins()


@pytest.fixture
def fetcher():
    return FakeFetcher({CSS_URL: MAIN_CSS, ICON_URL: ICON_BYTES})


async def resolve_media(tweet_id):
    return TweetMedia(url=f'https://video.twimg.com/{tweet_id}.mp4')


async def test_full_capture(fetcher):
    persister = FakePersister(fail={'https://example.com/broken.png'})
    session = CaptureSession(
        PAGE,
        PAGE_URL,
        fetcher=fetcher,
        store=ResourceStore(persister),
        media_resolver=resolve_media,
        options=CaptureOptions(root_selector='#tweet')
    )
    
    result = await session.run(
        frames=[FrameCapture(uuid='f-1', html='<p>frame body</p>')],
        tweet_id='42'
    )
    soup = session.document.soup
    
    assert result.html.startswith('<!DOCTYPE html>')
    assert result.url == PAGE_URL
    
    # cropped to the article
    assert soup.find(id='nav') is None
    assert soup.find(id='tweet') is not None
    
    # stylesheets inlined in place, the unreachable one kept as a link
    styles = soup.head.find_all('style', attrs={ATTR_STYLE: True})
    assert [s.get_text() for s in styles] == [
        minify_css('.logo { background: url(resources/icon.png); }'),
        minify_css('.inline { color: red; }'),
    ]
    assert styles[0]['media'] == 'screen'
    missing = soup.head.find('link', rel='stylesheet')
    assert missing[ATTR_HREF] == '/css/missing.css'
    assert missing['href'] == 'resources/missing.css'
    
    # icon stored once, shared by the stylesheet and the <img>
    assert persister.calls.count(ICON_URL) == 1
    logo = soup.find(id='logo')
    assert logo['src'] == 'resources/icon.png'
    assert logo[ATTR_SRC] == '/icon.png'
    assert not logo.has_attr('srcset')
    
    # a failed resource falls back to its absolute URL
    assert soup.find(id='broken')['src'] == 'https://example.com/broken.png'
    assert [f.url for f in result.failures] == ['https://example.com/broken.png']
    assert all(isinstance(f, TaskFailure) for f in result.failures)
    assert result.references and all(isinstance(r, ResourceReference) for r in result.references)
    
    # canonical link untouched
    assert soup.head.find('link', rel='canonical')['href'] == PAGE_URL
    
    frame = soup.find(id='frame')
    assert frame['srcdoc'] == '<p>frame body</p>'
    assert frame[ATTR_SRC] == 'https://embed.example.com/x'
    assert not frame.has_attr('src')
    
    shadow = BeautifulSoup(soup.find(id='host')[ATTR_SHADOW_CONTENT], 'html.parser')
    assert shadow.style.get_text() == minify_css('.s { color: blue; }')
    
    video = soup.find('video')
    assert video[ATTR_VIDEO] == 'gif'
    assert video['src'] == 'https://video.twimg.com/42.mp4'
    assert soup.find(class_='player') is None
    
    assert len(soup.head.find_all('script', attrs={ATTR_SCRIPT: True})) == 1
    assert session.document.meta_element is not None


async def test_no_storing_records_provenance_only(fetcher):
    session = CaptureSession(
        PAGE,
        PAGE_URL,
        fetcher=fetcher,
        options=CaptureOptions(no_storing=True, inline_stylesheets=False)
    )
    
    result = await session.run()
    soup = session.document.soup
    
    logo = soup.find(id='logo')
    assert logo['src'] == '/icon.png'
    assert logo[ATTR_SRC] == '/icon.png'
    assert result.failures == []
    assert fetcher.requests == []
    assert len(soup.head.find_all('link', rel='stylesheet')) == 2


async def test_embed_data_urls(fetcher, persister):
    session = CaptureSession(
        PAGE,
        PAGE_URL,
        fetcher=fetcher,
        store=ResourceStore(persister),
        options=CaptureOptions(embed_data_urls=True)
    )
    
    await session.run()
    
    script = session.document.head.find('script', attrs={ATTR_DATA_SCRIPT: True})
    icon_data_url = 'data:image/png;base64,' + base64.b64encode(ICON_BYTES).decode('ascii')
    assert f'const dataList = [["{ICON_URL}","{icon_data_url}"]]' in script.string


async def test_plugins_run_on_document(fetcher, persister):
    @plugins.register_plugin
    def drop_header(document):
        document.soup.find(id='nav').decompose()
    
    session = CaptureSession(PAGE, PAGE_URL, fetcher=fetcher, store=ResourceStore(persister))
    await session.run()
    
    assert session.document.soup.find(id='nav') is None


def test_store_required_unless_no_storing():
    with pytest.raises(ValueError):
        CaptureSession(PAGE, PAGE_URL)


async def test_inlined_sheet_keeps_imports_relative_to_sheet(persister):
    sheet_url = 'https://example.com/static/css/main.css'
    fetcher = FakeFetcher({sheet_url: '@import "reset.css";\n.a { color: red; }'})
    page = '<html><head><link rel="stylesheet" href="/static/css/main.css"></head><body></body></html>'
    session = CaptureSession(page, 'https://example.com/articles/page.html', fetcher=fetcher, store=ResourceStore(persister))
    
    await session.run()
    
    style = session.document.head.find('style', attrs={ATTR_STYLE: True})
    assert '"resources/reset.css"' in style.get_text()
    assert 'https://example.com/static/css/reset.css' in persister.calls
