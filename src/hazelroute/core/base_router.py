"""Plugin-free router runtime (source of truth).

The module exposes :class:`BaseRouter`, which owns a route table, a middleware
registry and a diagnostics collector, and wires them to the dispatcher and the
sitemap generator. :class:`~hazelroute.core.router.Router` adds the plugin
pipeline on top and must preserve these semantics.

Constructor and slots
---------------------
Constructor signature::

    BaseRouter(name=None, *, strict=False, not_found_handler=None,
               use_smartasync=None, run_kwargs=None)

- ``strict``: when true, every failure that would be recorded as a diagnostic
  is recorded *and* raised (``RegistrationError`` / ``ResolutionError`` /
  ``PatternError`` / ``MiddlewareError``).
- ``not_found_handler`` and ``use_smartasync`` become defaults merged via
  ``SmartOptions`` in ``run()``; extra ``run_kwargs`` are copied into
  ``_run_defaults``.
- Slots: ``name``, ``strict``, ``table``, ``diagnostics``, ``_middleware``,
  ``_dispatcher``, ``_handlers`` (route key → wrapped callable),
  ``_sitemap_config``, ``_run_defaults``.

Registration
------------
``register(uri, action, method="GET", middleware=None, attributes=None)``

- ``action`` is resolved through :func:`hazelroute.core.resolver.resolve`.
  ``ResolutionError`` is recorded and the table is left untouched.
- A non-callable action records ``"The action provided is not callable."``.
- ``uri`` is compiled; ``PatternError`` is recorded.
- The record ``{sitemap: False}`` updated with ``attributes`` is stored under
  ``(METHOD, pattern)``, fully replacing an earlier record with the same key.
- Returns a :class:`Registration` (``route`` or ``error``). ``route()`` is the
  chaining variant and returns ``self``.

``load_routes(source)`` accepts an iterable of mappings or the import path of a
module exposing ``ROUTES``. Entries without ``uri`` or ``action`` record one
diagnostic each and are skipped. Defaults: ``method="GET"``,
``middleware=[]``, ``sitemap=False``; every other key lands in the attribute
bag verbatim. ``None`` for ``method`` or ``middleware`` counts as absent and a
single middleware string is one name.

``add_controller(target)`` registers every function of ``target`` (a class or
an instance) carrying ``@route`` markers. Marker discovery walks the reversed
MRO so overriding a method in a subclass keeps the base declaration position.

``middleware(name, handler)`` resolves ``handler`` with the same policy and
stores it by name; failures go to the ``middleware`` channel.

``set_sitemap(uri, included)`` updates the first route (any method) whose
original template equals ``uri``; otherwise records ``"Route '<uri>' not
found."``.

Dispatch
--------
``run(method, target, **options)`` strips a query string or fragment from
``target`` and delegates to :class:`~hazelroute.core.dispatcher.Dispatcher`.
On ``NOT_FOUND`` the ``not_found_handler`` option (if any) is called with
``(method, path)`` and its value stored on the result. ``use_smartasync``
wraps middleware and handlers with ``smartasync.smartasync``.

Sitemap
-------
``create_sitemap(uri, domain)`` stores a :class:`SitemapConfig` and registers a
GET route at ``uri`` returning an :class:`XmlDocument`. ``sitemap()`` renders
the XML and raises ``RuntimeError`` when no config was given.

Hooks for subclasses
--------------------
- ``_wrap_handler(route, call_next)``: wrap the handler (plugin pipeline).
- ``_after_route_registered(route)``: invoked after a route is stored.
- ``_route_middleware(route)``: extra middleware names appended after the
  route's own list (empty here).
- ``_describe_route_extra(route, info)``: extend ``members()`` output.

Default implementations are no-ops/passthrough.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from smartseeds import SmartOptions

from .diagnostics import GENERAL, MIDDLEWARE, Diagnostics
from .dispatcher import Dispatcher, DispatchResult
from .errors import HazelRouteError, MiddlewareError, RegistrationError, ResolutionError
from .middleware import MiddlewareRegistry
from .pattern import compile_pattern
from .resolver import resolve
from .sitemap import SitemapConfig, XmlDocument, generate_sitemap
from .table import Route, RouteTable, middleware_names, normalize_method

__all__ = ["BaseRouter", "Registration", "TARGET_ATTR_NAME", "RESERVED_ROUTE_KEYS"]

TARGET_ATTR_NAME = "__hazelroute_targets__"
RESERVED_ROUTE_KEYS = ("uri", "action", "method", "middleware")

logger = logging.getLogger("hazelroute")


@dataclass(frozen=True)
class Registration:
    """Outcome of a single ``register`` call."""

    route: Optional[Route] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.route is not None

    def __bool__(self) -> bool:
        return self.ok


class BaseRouter:
    """Plugin-free router: route table, middleware registry, dispatch, sitemap."""

    __slots__ = (
        "name",
        "strict",
        "table",
        "diagnostics",
        "_middleware",
        "_dispatcher",
        "_handlers",
        "_sitemap_config",
        "_run_defaults",
    )

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        strict: bool = False,
        not_found_handler: Optional[Callable] = None,
        use_smartasync: Optional[bool] = None,
        run_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self.strict = bool(strict)
        self.table = RouteTable()
        self.diagnostics = Diagnostics()
        self._middleware = MiddlewareRegistry()
        self._handlers: Dict[Tuple[str, str], Callable] = {}
        self._sitemap_config: Optional[SitemapConfig] = None
        defaults: Dict[str, Any] = dict(run_kwargs or {})
        if not_found_handler is not None:
            defaults.setdefault("not_found_handler", not_found_handler)
        if use_smartasync is not None:
            defaults.setdefault("use_smartasync", use_smartasync)
        self._run_defaults: Dict[str, Any] = defaults
        self._dispatcher = Dispatcher(
            self.table,
            self._middleware,
            self.diagnostics,
            handler_for=self._handler_for,
            extra_middleware=self._route_middleware,
        )

    # ------------------------------------------------------------------
    # Failure bookkeeping
    # ------------------------------------------------------------------
    def _fail(self, error: HazelRouteError, channel: str = GENERAL) -> str:
        message = str(error)
        self.diagnostics.record(message, channel)
        if self.strict:
            raise error
        return message

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(
        self,
        uri: str,
        action: Any,
        method: str = "GET",
        middleware: Union[str, Iterable[str], None] = None,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> Registration:
        """Add (or replace) the route for ``method`` + compiled ``uri``.

        Args:
            uri: URI template, ``{name}`` placeholders capture one segment.
            action: Callable, ``(owner, "member")`` pair or import-path pair.
            method: HTTP method, upper-cased before storage.
            middleware: Middleware names run before the handler, in order; a
                single string is one name.
            attributes: Extra route attributes (``sitemap``, ``visibility``...).

        Returns:
            A :class:`Registration`; failures are also recorded as diagnostics.
        """
        try:
            handler = resolve(action)
        except ResolutionError as exc:
            return Registration(error=self._fail(exc))
        if not callable(handler):
            return Registration(
                error=self._fail(RegistrationError("The action provided is not callable."))
            )
        try:
            pattern = compile_pattern(uri)
        except RegistrationError as exc:
            return Registration(error=self._fail(exc))

        route_attributes: Dict[str, Any] = {"sitemap": False}
        route_attributes.update(attributes or {})
        route = Route(
            method=normalize_method(method),
            uri=uri,
            pattern=pattern,
            handler=handler,
            middleware=middleware_names(middleware),
            attributes=route_attributes,
        )
        previous = self.table.upsert(route)
        if previous is not None:
            logger.debug("Route %s replaced %s", route.name, previous.name)
        self._after_route_registered(route)
        self._handlers[route.key] = self._wrap_handler(route, route.handler)
        return Registration(route=route)

    def route(
        self,
        uri: str,
        action: Any,
        method: str = "GET",
        middleware: Union[str, Iterable[str], None] = None,
        **attributes: Any,
    ) -> "BaseRouter":
        """Chaining form of :meth:`register`; keyword arguments become attributes."""
        self.register(uri, action, method=method, middleware=middleware, attributes=attributes)
        return self

    def middleware(self, name: str, handler: Any) -> "BaseRouter":
        """Register middleware ``name``; ``handler`` follows the action resolution policy."""
        try:
            resolved = resolve(handler)
        except ResolutionError as exc:
            self._fail(MiddlewareError(f"Middleware '{name}': {exc}"), MIDDLEWARE)
            return self
        if not callable(resolved):
            self._fail(MiddlewareError(f"Middleware '{name}' is not callable."), MIDDLEWARE)
            return self
        self._middleware.add(name, resolved)
        return self

    def load_routes(self, source: Any) -> int:
        """Register routes from declarative entries; return how many were added."""
        entries = self._load_route_source(source)
        if entries is None:
            return 0
        added = 0
        for raw in entries:
            entry = self._normalize_route_entry(raw)
            if entry is None:
                continue
            attributes = {
                key: value for key, value in entry.items() if key not in RESERVED_ROUTE_KEYS
            }
            result = self.register(
                entry["uri"],
                entry["action"],
                method=entry["method"],
                middleware=entry["middleware"],
                attributes=attributes,
            )
            if result.ok:
                added += 1
        return added

    def _load_route_source(self, source: Any) -> Optional[Iterable[Any]]:
        if not isinstance(source, str):
            return source
        try:
            module = importlib.import_module(source)
        except Exception as exc:
            self._fail(RegistrationError(f"Cannot import route source '{source}': {exc}"))
            return None
        entries = getattr(module, "ROUTES", None)
        if entries is None:
            entries = getattr(module, "routes", None)
        if entries is None:
            self._fail(RegistrationError(f"Route source '{source}' does not define ROUTES."))
            return None
        return entries

    def _normalize_route_entry(self, raw: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(raw, Mapping):
            self._fail(RegistrationError("The route definition must be a mapping."))
            return None
        if "uri" not in raw or raw["uri"] is None:
            self._fail(RegistrationError('The route does not contain a "uri" key.'))
            return None
        if "action" not in raw or raw["action"] is None:
            self._fail(RegistrationError('The route does not contain an "action" key.'))
            return None
        entry: Dict[str, Any] = {"sitemap": False}
        entry.update(raw)
        if entry.get("method") is None:
            entry["method"] = "GET"
        if entry.get("middleware") is None:
            entry["middleware"] = []
        return entry

    def add_controller(self, target: Any) -> "BaseRouter":
        """Register every ``@route``-marked method of a class or instance."""
        for attr_name, markers in self._iter_marked_methods(target):
            for marker in markers:
                payload = dict(marker)
                uri = payload.pop("uri")
                method = payload.pop("method", "GET")
                middleware = payload.pop("middleware", None)
                self.register(
                    uri,
                    (target, attr_name),
                    method=method,
                    middleware=middleware,
                    attributes=payload,
                )
        return self

    def _iter_marked_methods(self, target: Any) -> Iterator[Tuple[str, List[Dict[str, Any]]]]:
        cls = target if inspect.isclass(target) else type(target)
        found: Dict[str, List[Dict[str, Any]]] = {}
        for base in reversed(cls.__mro__):
            for attr_name, value in vars(base).items():
                func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
                markers = getattr(func, TARGET_ATTR_NAME, None)
                if markers:
                    found[attr_name] = list(markers)
                elif attr_name in found:
                    # overridden without markers: the subclass opted out
                    del found[attr_name]
        yield from found.items()

    def set_sitemap(self, uri: str, included: bool) -> bool:
        route = self.table.find_by_uri(uri)
        if route is None:
            self._fail(RegistrationError(f"Route '{uri}' not found."))
            return False
        route.sitemap = included
        return True

    # ------------------------------------------------------------------
    # Sitemap
    # ------------------------------------------------------------------
    def create_sitemap(self, uri: str, domain: str) -> "BaseRouter":
        """Configure the sitemap and expose it as a GET route at ``uri``."""
        self._sitemap_config = SitemapConfig(uri=uri, domain=domain)
        self.register(uri, self._sitemap_response, method="GET")
        return self

    @property
    def sitemap_config(self) -> Optional[SitemapConfig]:
        return self._sitemap_config

    def sitemap(self) -> str:
        if self._sitemap_config is None:
            raise RuntimeError("Sitemap is not configured; call create_sitemap() first")
        return generate_sitemap(self.table, self._sitemap_config)

    def _sitemap_response(self) -> XmlDocument:
        return XmlDocument(body=self.sitemap())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def run(self, method: str, target: str, **options: Any) -> DispatchResult:
        """Dispatch one request; never raises for routing or middleware lookups."""
        opts = SmartOptions(options, defaults=self._run_defaults)
        not_found = getattr(opts, "not_found_handler", None)
        use_smartasync = getattr(opts, "use_smartasync", False)

        path = target.split("#", 1)[0].split("?", 1)[0] or "/"
        wrap = self._identity
        if use_smartasync:
            from smartasync import smartasync  # type: ignore

            wrap = smartasync

        result = self._dispatcher.dispatch(method, path, wrap=wrap)
        if not result.found and not_found is not None:
            result.value = not_found(result.method, result.path)
        return result

    def match(self, method: str, path: str) -> Optional[Route]:
        """Return the route that ``run`` would pick, without executing anything."""
        found = self._dispatcher.match(method, path)
        return found[0] if found else None

    @staticmethod
    def _identity(func: Callable) -> Callable:
        return func

    def _handler_for(self, route: Route) -> Any:
        return self._handlers.get(route.key, route.handler)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    @property
    def errors(self) -> Tuple[str, ...]:
        return self.diagnostics.errors()

    def has_errors(self) -> bool:
        return self.diagnostics.has_errors()

    def display_errors(self) -> Optional[str]:
        return self.diagnostics.to_html()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def routes(self, method: Optional[str] = None) -> Tuple[Route, ...]:
        if method is None:
            return tuple(self.table)
        return self.table.routes(method)

    def members(self) -> Dict[str, Any]:
        """Return route descriptions grouped by method, in dispatch order."""
        result: Dict[str, Any] = {}
        for route in self.table:
            info = self._route_member_info(route)
            result.setdefault(route.method, {})[route.uri] = info
        return result

    def _route_member_info(self, route: Route) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "name": route.name,
            "pattern": route.pattern.source,
            "placeholders": list(route.placeholders),
            "middleware": list(route.middleware),
            "attributes": dict(route.attributes),
            "callable": route.handler,
            "doc": inspect.getdoc(route.handler) or "",
        }
        extra = self._describe_route_extra(route, info)
        if extra:
            info.update(extra)
        return info

    # ------------------------------------------------------------------
    # Hooks (no-op for BaseRouter)
    # ------------------------------------------------------------------
    def _wrap_handler(self, route: Route, call_next: Callable) -> Callable:
        return call_next

    def _rebuild_handlers(self) -> None:
        self._handlers = {
            route.key: self._wrap_handler(route, route.handler) for route in self.table
        }

    def _after_route_registered(self, route: Route) -> None:
        return None

    def _route_middleware(self, route: Route) -> List[str]:
        return []

    def _describe_route_extra(self, route: Route, info: Dict[str, Any]) -> Dict[str, Any]:
        return {}
