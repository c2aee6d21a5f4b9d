"""Route records and the per-method route table.

The table maps an upper-case HTTP method to an insertion-ordered dict keyed by
the compiled pattern source. Dispatch walks that dict in order, so insertion
order is the only precedence rule. Upserting an existing key replaces the
record but keeps its original position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .pattern import CompiledPattern

__all__ = ["Route", "RouteTable", "middleware_names", "normalize_method"]


def normalize_method(method: str) -> str:
    return str(method).strip().upper()


def middleware_names(middleware: Any) -> List[str]:
    """A single name counts as a one-element chain."""
    if middleware is None:
        return []
    if isinstance(middleware, str):
        return [middleware]
    return list(middleware)


@dataclass
class Route:
    """A registered mapping from method + URI template to a handler."""

    method: str
    uri: str
    pattern: CompiledPattern
    handler: Callable
    middleware: List[str] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Logical name used to key per-route plugin configuration."""
        return f"{self.method} {self.uri}"

    @property
    def key(self) -> Tuple[str, str]:
        """Table identity: method plus compiled pattern source."""
        return (self.method, self.pattern.source)

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return self.pattern.placeholders

    @property
    def sitemap(self) -> bool:
        return bool(self.attributes.get("sitemap", False))

    @sitemap.setter
    def sitemap(self, included: bool) -> None:
        self.attributes["sitemap"] = bool(included)

    @property
    def visibility(self) -> Optional[str]:
        return self.attributes.get("visibility")


class RouteTable:
    __slots__ = ("_routes",)

    def __init__(self) -> None:
        self._routes: Dict[str, Dict[str, Route]] = {}

    def upsert(self, route: Route) -> Optional[Route]:
        """Store ``route``; return the record it replaced, if any."""
        bucket = self._routes.setdefault(route.method, {})
        previous = bucket.get(route.pattern.source)
        bucket[route.pattern.source] = route
        return previous

    def has_method(self, method: str) -> bool:
        return normalize_method(method) in self._routes

    def methods(self) -> Tuple[str, ...]:
        return tuple(self._routes)

    def routes(self, method: str) -> Tuple[Route, ...]:
        return tuple(self._routes.get(normalize_method(method), {}).values())

    def get(self, method: str, uri: str) -> Optional[Route]:
        """Return the route whose original template is ``uri`` for ``method``."""
        for route in self.routes(method):
            if route.uri == uri:
                return route
        return None

    def find_by_uri(self, uri: str) -> Optional[Route]:
        """First route, across all methods, whose original template equals ``uri``."""
        for route in self:
            if route.uri == uri:
                return route
        return None

    def __iter__(self) -> Iterator[Route]:
        for bucket in self._routes.values():
            yield from bucket.values()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._routes.values())

    def __contains__(self, key: Tuple[str, str]) -> bool:
        method, uri = key
        return self.get(method, uri) is not None
