from page_clipper.capture.frames import FrameCapture, FrameEmbedder
from page_clipper.utils.constants import ATTR_IFRAME_UUID, ATTR_SRC


def test_embed_iframe_contents(make_document):
    document = make_document(
        '<iframe id="f1" data-page-clipper-iframe-uuid="one" src="https://ads.example.com/frame"></iframe>'
        '<iframe id="f2" data-page-clipper-iframe-uuid="two" src="/embed"></iframe>'
    )
    
    embedded = FrameEmbedder(document).embed_iframe_contents([
        FrameCapture(uuid='one', html='<!DOCTYPE html><html><body><p>inner "one"</p></body></html>'),
    ])
    
    frame = document.soup.find(id='f1')
    assert embedded == [frame]
    assert frame['srcdoc'] == '<!DOCTYPE html><html><body><p>inner "one"</p></body></html>'
    assert frame[ATTR_SRC] == 'https://ads.example.com/frame'
    assert not frame.has_attr('src')
    assert not frame.has_attr(ATTR_IFRAME_UUID)
    
    untouched = document.soup.find(id='f2')
    assert untouched['src'] == '/embed'
    assert untouched[ATTR_IFRAME_UUID] == 'two'


def test_missing_placeholder_is_skipped(make_document):
    document = make_document('<iframe data-page-clipper-iframe-uuid="one" src="/a"></iframe>')
    
    embedded = FrameEmbedder(document).embed_iframe_contents([
        FrameCapture(uuid='gone', html='<p>x</p>'),
        FrameCapture(uuid='one', html='<p>y</p>'),
    ])
    
    assert len(embedded) == 1
    assert document.get_iframes() == []


def test_placeholder_without_src(make_document):
    document = make_document('<iframe id="f" data-page-clipper-iframe-uuid="one"></iframe>')
    
    FrameEmbedder(document).embed_iframe_contents([FrameCapture(uuid='one', html='<p>y</p>')])
    
    frame = document.soup.find(id='f')
    assert frame['srcdoc'] == '<p>y</p>'
    assert not frame.has_attr(ATTR_SRC)
