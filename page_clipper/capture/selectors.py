"""
Typed selector abstraction over CSS selector strings.

An ElementSelector reads as "matches A but none of B1..Bn"; several selectors
passed together select their union.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..utils.constants import (
    ATTR_IFRAME_UUID,
    ATTR_SHADOW_CONTENT,
    ATTR_VIDEO,
    ATTR_STYLE,
    ATTR_SCRIPT,
    ATTR_DATA_SCRIPT,
)


@dataclass(frozen=True)
class ElementSelector:
    """A CSS selector with optional exclusion sub-selectors."""
    
    selector: str
    exclude: Tuple[str, ...] = ()
    
    def to_css(self) -> str:
        """Render as a single CSS selector using :not()."""
        return self.selector + ''.join(f':not({e})' for e in self.exclude)
    
    def __str__(self) -> str:
        return self.to_css()


def selectors_to_string(*selectors) -> str:
    """
    Join selectors into one comma-separated union.
    
    Plain strings are accepted alongside ElementSelector instances.
    """
    return ', '.join(
        s.to_css() if isinstance(s, ElementSelector) else str(s)
        for s in selectors
    )


def _attr_selector(attr: str, value: Optional[str] = None) -> ElementSelector:
    if value is None:
        return ElementSelector(f'[{attr}]')
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return ElementSelector(f'[{attr}="{escaped}"]')


class MarkerSelectors:
    """Selectors for the marker attributes written during capture."""
    
    @staticmethod
    def iframe_uuid(uuid: Optional[str] = None) -> ElementSelector:
        return _attr_selector(ATTR_IFRAME_UUID, uuid)
    
    @staticmethod
    def shadow_content() -> ElementSelector:
        return _attr_selector(ATTR_SHADOW_CONTENT)
    
    @staticmethod
    def video() -> ElementSelector:
        return _attr_selector(ATTR_VIDEO)
    
    @staticmethod
    def style() -> ElementSelector:
        return _attr_selector(ATTR_STYLE)
    
    @staticmethod
    def script() -> ElementSelector:
        return _attr_selector(ATTR_SCRIPT)
    
    @staticmethod
    def data_script() -> ElementSelector:
        return _attr_selector(ATTR_DATA_SCRIPT)
