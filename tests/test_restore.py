import json

from page_clipper.capture.restore import (
    RESTORE_SCRIPT_VERSION,
    append_restore_script,
    render_restore_script,
)
from page_clipper.utils.constants import ATTR_SCRIPT, ATTR_SHADOW_CONTENT


def test_render_substitutes_every_placeholder():
    script = render_restore_script()
    
    assert '__' not in script
    assert f'restore script v{RESTORE_SCRIPT_VERSION}' in script
    assert f'var shadowHostSelector = {json.dumps("[" + ATTR_SHADOW_CONTENT + "]")};' in script
    assert 'var videoElementSelector = "[data-page-clipper-video]";' in script
    assert f'var shadowContentAttribute = {json.dumps(ATTR_SHADOW_CONTENT)};' in script


def test_render_waits_for_document_ready():
    script = render_restore_script()
    
    assert "document.readyState === 'loading'" in script
    assert "addEventListener('DOMContentLoaded', onload)" in script
    assert 'attachShadow' in script


def test_render_with_custom_selectors():
    script = render_restore_script('[x-shadow="a\'b"]', 'video.player')
    
    assert 'var shadowHostSelector = "[x-shadow=\\"a\'b\\"]";' in script
    assert 'var videoElementSelector = "video.player";' in script


def test_append_restore_script_once(make_document):
    document = make_document('<p>x</p>')
    
    first = append_restore_script(document)
    second = append_restore_script(document)
    
    assert first is second
    scripts = document.head.find_all('script', attrs={ATTR_SCRIPT: True})
    assert len(scripts) == 1
    assert scripts[0].string == render_restore_script()
