"""Request dispatcher (source of truth).

``Dispatcher.dispatch(method, path)`` walks a fixed sequence of states:

1. method lookup: the upper-cased method must have at least one route,
   otherwise the outcome is ``NOT_FOUND``;
2. pattern match: the method's routes are tried in insertion order and the
   first anchored match wins; no match is ``NOT_FOUND``;
3. middleware: the route's own names followed by the names returned by
   ``extra_middleware(route)`` are looked up in the registry and invoked with
   the matched :class:`Route`, in order, return values ignored. Unknown names
   are recorded on the ``middleware`` channel and skipped;
4. handler: ``handler_for(route)`` is called with the captured values as
   positional arguments. A non-callable handler is recorded and the outcome is
   still ``HANDLED``.

Lookup failures never raise. Exceptions raised by middleware or handlers
propagate unchanged.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from .diagnostics import MIDDLEWARE, Diagnostics
from .middleware import MiddlewareRegistry
from .table import Route, RouteTable, normalize_method

__all__ = ["DispatchOutcome", "DispatchResult", "Dispatcher"]

logger = logging.getLogger("hazelroute")


class DispatchOutcome(enum.Enum):
    HANDLED = "handled"
    NOT_FOUND = "not_found"


@dataclass
class DispatchResult:
    outcome: DispatchOutcome
    method: str
    path: str
    route: Optional[Route] = None
    params: Tuple[str, ...] = ()
    value: Any = None
    middleware: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.outcome is DispatchOutcome.HANDLED

    @property
    def status_code(self) -> int:
        return 200 if self.found else 404

    def __bool__(self) -> bool:
        return self.found


def _identity(func: Callable) -> Callable:
    return func


class Dispatcher:
    __slots__ = ("table", "middleware", "diagnostics", "handler_for", "extra_middleware")

    def __init__(
        self,
        table: RouteTable,
        middleware: MiddlewareRegistry,
        diagnostics: Diagnostics,
        *,
        handler_for: Optional[Callable[[Route], Any]] = None,
        extra_middleware: Optional[Callable[[Route], List[str]]] = None,
    ) -> None:
        self.table = table
        self.middleware = middleware
        self.diagnostics = diagnostics
        self.handler_for = handler_for or (lambda route: route.handler)
        self.extra_middleware = extra_middleware or (lambda route: [])

    def match(self, method: str, path: str) -> Optional[Tuple[Route, Tuple[str, ...]]]:
        """Return the first matching route and its captured values."""
        method = normalize_method(method)
        if not self.table.has_method(method):
            return None
        for route in self.table.routes(method):
            params = route.pattern.match(path)
            if params is not None:
                return route, params
        return None

    def dispatch(
        self,
        method: str,
        path: str,
        *,
        wrap: Callable[[Callable], Callable] = _identity,
    ) -> DispatchResult:
        method = normalize_method(method)
        found = self.match(method, path)
        if found is None:
            logger.debug("No route for %s %s", method, path)
            return DispatchResult(DispatchOutcome.NOT_FOUND, method, path)
        route, params = found
        logger.debug("%s %s matched %s", method, path, route.pattern.source)

        chain = list(route.middleware) + list(self.extra_middleware(route))
        self.run_middleware(route, chain, wrap=wrap)

        result = DispatchResult(
            DispatchOutcome.HANDLED,
            method,
            path,
            route=route,
            params=params,
            middleware=chain,
        )
        handler = self.handler_for(route)
        if handler is None or not callable(handler):
            self.diagnostics.record(
                f"The action is not callable for route: {route.pattern.source}"
            )
            return result
        result.value = wrap(handler)(*params)
        return result

    def run_middleware(
        self,
        route: Route,
        names: List[str],
        *,
        wrap: Callable[[Callable], Callable] = _identity,
    ) -> None:
        for name in names:
            handler = self.middleware.get(name)
            if handler is None:
                self.diagnostics.record(f"Middleware '{name}' not found.", MIDDLEWARE)
                continue
            wrap(handler)(route)
