"""Decorator helper for marking controller methods as routes.

``route(uri, *, method="GET", middleware=None, **attributes)`` stores a marker
dict on the function under ``TARGET_ATTR_NAME``; nothing is registered at
decoration time. ``Router.add_controller`` reads the markers later. Stacking
the decorator adds one marker per call, so a function can serve several
methods or URIs. ``staticmethod``/``classmethod`` objects are marked through
their underlying function.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Union

from .base_router import TARGET_ATTR_NAME
from .table import middleware_names

__all__ = ["route"]


def route(
    uri: str,
    *,
    method: str = "GET",
    middleware: Union[str, Iterable[str], None] = None,
    **attributes: Any,
) -> Callable:
    """Mark a controller method as the handler for ``method`` + ``uri``.

    Args:
        uri: URI template with ``{name}`` placeholders.
        method: HTTP method.
        middleware: Middleware names run before the handler.
        attributes: Route attributes (``sitemap``, ``visibility``...).
    """

    def decorator(func: Any) -> Any:
        target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
        markers = list(getattr(target, TARGET_ATTR_NAME, []))
        payload = {"uri": uri, "method": method, "middleware": middleware_names(middleware)}
        payload.update(attributes)
        markers.append(payload)
        setattr(target, TARGET_ATTR_NAME, markers)
        return func

    return decorator
