from bs4 import BeautifulSoup

from page_clipper.capture.shadow import ShadowDomOptimizer
from page_clipper.capture.store import ResourceStore
from page_clipper.capture.stylesheets import StylesheetPipeline, minify_css
from page_clipper.utils.constants import ATTR_SHADOW_CONTENT, ATTR_STYLE

from .conftest import FakePersister


def shadow_host(element_id, content):
    return f'<div id="{element_id}" {ATTR_SHADOW_CONTENT}="{content}"></div>'


def parse_content(document, element_id):
    host = document.soup.find(id=element_id)
    return BeautifulSoup(host[ATTR_SHADOW_CONTENT], 'html.parser')


async def test_styles_are_optimized_in_document_order(make_document):
    content = (
        '&lt;style&gt;.first { color: red; }&lt;/style&gt;'
        '&lt;p class=&quot;x&quot;&gt;hello&lt;/p&gt;'
        '&lt;style&gt;.second { background: url(bg.png); }&lt;/style&gt;'
    )
    document = make_document(shadow_host('host', content))
    persister = FakePersister()
    pipeline = StylesheetPipeline(store=ResourceStore(persister))
    
    count = await ShadowDomOptimizer(document, pipeline).optimize()
    
    assert count == 1
    shadow = parse_content(document, 'host')
    styles = shadow.find_all('style')
    assert [s.get_text() for s in styles] == [
        minify_css('.first { color: red; }'),
        minify_css('.second { background: url(resources/bg.png); }'),
    ]
    assert all(s.has_attr(ATTR_STYLE) for s in styles)
    assert shadow.find('p').get_text() == 'hello'
    assert persister.calls == ['https://example.com/articles/bg.png']


async def test_every_host_is_processed(make_document):
    document = make_document(
        shadow_host('a', '&lt;style&gt;a { color: red; }&lt;/style&gt;')
        + shadow_host('b', '&lt;style&gt;b { color: blue; }&lt;/style&gt;')
    )
    
    count = await ShadowDomOptimizer(document, StylesheetPipeline()).optimize()
    
    assert count == 2
    assert parse_content(document, 'a').style.get_text() == minify_css('a { color: red; }')
    assert parse_content(document, 'b').style.get_text() == minify_css('b { color: blue; }')


async def test_empty_host_is_skipped(make_document):
    document = make_document(shadow_host('empty', ''))
    
    count = await ShadowDomOptimizer(document, StylesheetPipeline()).optimize()
    
    assert count == 0
    assert document.soup.find(id='empty')[ATTR_SHADOW_CONTENT] == ''


async def test_host_without_styles_keeps_markup(make_document):
    document = make_document(shadow_host('host', '&lt;slot&gt;&lt;/slot&gt;&lt;span&gt;text&lt;/span&gt;'))
    
    await ShadowDomOptimizer(document, StylesheetPipeline()).optimize()
    
    assert document.soup.find(id='host')[ATTR_SHADOW_CONTENT] == '<slot></slot><span>text</span>'
