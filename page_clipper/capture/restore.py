"""
Restore script appended to every captured document.

The script is a fixed, versioned template. The selectors it needs and the
name of the shadow content attribute are substituted in as JSON string
literals.
"""

import json
from typing import Optional

from ..utils.constants import ATTR_SCRIPT, ATTR_SHADOW_CONTENT
from .selectors import MarkerSelectors


RESTORE_SCRIPT_VERSION = '1'

RESTORE_SCRIPT_TEMPLATE = """
// page-clipper restore script v__VERSION__
(function () {
    var shadowHostSelector = __SHADOW_HOST_SELECTOR__;
    var videoElementSelector = __VIDEO_ELEMENT_SELECTOR__;
    var shadowContentAttribute = __SHADOW_CONTENT_ATTRIBUTE__;

    function onload() {
        var videoElement = document.querySelector(videoElementSelector);

        if (videoElement) {
            var playOrPause = function () {
                return videoElement.paused ? videoElement.play() : videoElement.pause();
            };

            videoElement.onclick = playOrPause;

            document.body.addEventListener('keydown', function (event) {
                if (event.code === 'Space' || event.keyCode === 32) {
                    event.preventDefault();
                    playOrPause();
                }
            });
        }

        document.querySelectorAll(shadowHostSelector).forEach(function (host) {
            var content = host.getAttribute(shadowContentAttribute);
            if (!content || host.shadowRoot) {
                return;
            }

            var shadow = host.attachShadow({ mode: 'open' });
            shadow.innerHTML = content;
        });
    }

    if (document.readyState === 'loading') {
        document.addEventListener('DOMContentLoaded', onload);
    } else {
        onload();
    }
})();
"""


def render_restore_script(
    shadow_host_selector: Optional[str] = None,
    video_element_selector: Optional[str] = None
) -> str:
    """
    Fill the restore template with its selectors.
    
    Args:
        shadow_host_selector: Attribute selector of shadow placeholders
        video_element_selector: Selector of the embedded video element
        
    Returns:
        Script source
    """
    shadow_host_selector = shadow_host_selector or MarkerSelectors.shadow_content().to_css()
    video_element_selector = video_element_selector or MarkerSelectors.video().to_css()
    
    return (
        RESTORE_SCRIPT_TEMPLATE
        .replace('__VERSION__', RESTORE_SCRIPT_VERSION)
        .replace('__SHADOW_HOST_SELECTOR__', json.dumps(shadow_host_selector))
        .replace('__VIDEO_ELEMENT_SELECTOR__', json.dumps(video_element_selector))
        .replace('__SHADOW_CONTENT_ATTRIBUTE__', json.dumps(ATTR_SHADOW_CONTENT))
    )


def append_restore_script(document):
    """
    Append the restore script to the document head, at most once.
    
    Args:
        document: DocumentModel to modify
        
    Returns:
        The script element (the existing one if already present)
    """
    existing = document.find_one(MarkerSelectors.script())
    if existing is not None:
        return existing
    
    script = document.new_tag('script', {ATTR_SCRIPT: ''})
    script.string = render_restore_script()
    document.head.append(script)
    return script
