"""
Plugin registry.

Plugins are callables taking the DocumentModel of a capture; they run once
per document, right after it is parsed, and may change the tree freely.
"""

from typing import Callable, List

from .utils.log import get_logger


Plugin = Callable[..., None]

_plugins: List[Plugin] = []

logger = get_logger("plugins")


def register_plugin(plugin: Plugin) -> Plugin:
    """
    Register a plugin. Returns it unchanged so it works as a decorator.
    """
    if plugin not in _plugins:
        _plugins.append(plugin)
    return plugin


def unregister_plugin(plugin: Plugin) -> None:
    """Remove a registered plugin, if present."""
    if plugin in _plugins:
        _plugins.remove(plugin)


def clear_plugins() -> None:
    """Remove every registered plugin."""
    _plugins.clear()


def registered_plugins() -> List[Plugin]:
    return list(_plugins)


def exec_plugins(document) -> None:
    """
    Run every registered plugin against a document, in registration order.
    
    A failing plugin is logged and the remaining plugins still run.
    
    Args:
        document: DocumentModel being captured
    """
    for plugin in list(_plugins):
        name = getattr(plugin, '__name__', repr(plugin))
        try:
            plugin(document)
        except Exception as e:
            logger.warning(f"Plugin {name} failed on {document.url}: {e}")
        else:
            logger.debug(f"Plugin {name} ran on {document.url}")
