"""Router with plugin pipeline (source of truth).

``Router`` adds plugins to :class:`~hazelroute.core.base_router.BaseRouter`.
A plugin can observe registrations, wrap handlers, append middleware names to
a route's chain and publish metadata through ``members()``.

State kept per router
---------------------
- ``_plugins``: attached plugin instances, attachment order.
- ``_plugins_by_name``: lookup by plugin name.
- ``_plugin_info``: ``{plugin_name: {target: {"config": {...}, "locals": {...}}}}``
  where ``target`` is ``"--base--"`` for router-wide settings or a route name
  such as ``"GET /user/{id}"``.

Plugin classes
--------------
``Router.register_plugin(cls, name=None)`` stores ``cls`` in a process-wide
registry under ``name`` or ``cls.plugin_code``. Non ``BasePlugin`` classes
raise ``TypeError``; a class without ``plugin_code`` raises ``ValueError``.
Registering a different class under a taken code without an explicit ``name``
raises ``ValueError``. ``available_plugins()`` returns a copy of the registry.

``plug(name, **config)`` instantiates the registered class for this router,
replays ``on_register`` over routes already in the table and rebuilds every
wrapped handler, so plugins can be attached before or after routes.

Pipeline
--------
The first attached plugin is the outermost wrapper. Each layer checks
``is_plugin_enabled(route.name, plugin.name)`` on every call and steps aside
when switched off. Middleware names contributed via ``route_middleware`` run
after the route's own list, in attachment order.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Type

from hazelroute.core.base_router import BaseRouter
from hazelroute.core.table import Route
from hazelroute.plugins._base_plugin import BASE_TARGET, BasePlugin

__all__ = ["Router"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


def _new_bucket() -> Dict[str, Dict[str, Any]]:
    return {"config": {}, "locals": {}}


class Router(BaseRouter):
    """BaseRouter plus attachable plugins."""

    __slots__ = BaseRouter.__slots__ + ("_plugins", "_plugins_by_name", "_plugin_info")

    def __init__(self, *args, **kwargs):
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------
    # Plugin classes
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Make ``plugin_class`` available to ``plug()`` on every router.

        Args:
            plugin_class: ``BasePlugin`` subclass declaring ``plugin_code``.
            name: Registry key; when given it replaces any previous entry.
        """
        if not (isinstance(plugin_class, type) and issubclass(plugin_class, BasePlugin)):
            raise TypeError(f"{plugin_class!r} is not a BasePlugin subclass")
        code = plugin_class.plugin_code
        if not code:
            raise ValueError(f"{plugin_class.__name__} does not declare a plugin_code")
        if name is not None:
            _PLUGIN_REGISTRY[name] = plugin_class
            return
        current = _PLUGIN_REGISTRY.setdefault(code, plugin_class)
        if current is not plugin_class:
            raise ValueError(
                f"Plugin code '{code}' is taken by {current.__name__}; pass name= to replace it"
            )

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    # ------------------------------------------------------------------
    # Attached plugins
    # ------------------------------------------------------------------
    def plug(self, plugin: str, **config: Any) -> "Router":
        """Attach the plugin registered as ``plugin`` and return the router."""
        if not isinstance(plugin, str):
            raise TypeError(f"plug() expects a plugin name, got {type(plugin).__name__}")
        try:
            plugin_class = _PLUGIN_REGISTRY[plugin]
        except KeyError:
            known = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(f"Unknown plugin '{plugin}' (registered: {known})") from None
        instance = plugin_class(self, **config)
        self._plugins.append(instance)
        self._plugins_by_name[instance.name] = instance
        for route in self.table:
            instance.on_register(self, route)
        self._rebuild_handlers()
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        return list(self._plugins)

    def get_config(self, plugin_name: str, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Merged config of an attached plugin, optionally with a route's overrides."""
        return self._attached(plugin_name).configuration(route_name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._attached(name)

    def _attached(self, plugin_name: str) -> BasePlugin:
        try:
            return self._plugins_by_name[plugin_name]
        except KeyError:
            raise AttributeError(
                f"Router '{self.name}' has no plugin '{plugin_name}' attached"
            ) from None

    # ------------------------------------------------------------------
    # Per-route switch
    # ------------------------------------------------------------------
    def set_plugin_enabled(self, route_name: str, plugin_name: str, enabled: bool = True) -> None:
        targets = self._targets_of(plugin_name)
        targets.setdefault(route_name, _new_bucket())["locals"]["enabled"] = bool(enabled)

    def is_plugin_enabled(self, route_name: str, plugin_name: str) -> bool:
        targets = self._targets_of(plugin_name)
        for target in (route_name, BASE_TARGET):
            route_locals = targets.get(target, {}).get("locals", {})
            if "enabled" in route_locals:
                return bool(route_locals["enabled"])
        return True

    def _targets_of(self, plugin_name: str) -> Dict[str, Any]:
        self._attached(plugin_name)
        targets = self._plugin_info.setdefault(plugin_name, {})
        targets.setdefault(BASE_TARGET, _new_bucket())
        return targets

    # ------------------------------------------------------------------
    # BaseRouter hooks
    # ------------------------------------------------------------------
    def _wrap_handler(self, route: Route, call_next: Callable) -> Callable:
        handler = call_next
        for plugin in reversed(self._plugins):
            handler = self._guarded(plugin, route, plugin.wrap_handler(self, route, handler), handler)
        return handler

    def _guarded(
        self,
        plugin: BasePlugin,
        route: Route,
        layer: Callable,
        inner: Callable,
    ) -> Callable:
        @wraps(inner)
        def guard(*args, **kwargs):
            if self.is_plugin_enabled(route.name, plugin.name):
                return layer(*args, **kwargs)
            return inner(*args, **kwargs)

        return guard

    def _after_route_registered(self, route: Route) -> None:
        for plugin in self._plugins:
            plugin.on_register(self, route)

    def _route_middleware(self, route: Route) -> List[str]:
        return [
            name for plugin in self._plugins for name in (plugin.route_middleware(self, route) or [])
        ]

    def _describe_route_extra(self, route: Route, info: Dict[str, Any]) -> Dict[str, Any]:
        described: Dict[str, Dict[str, Any]] = {}
        for plugin in self._plugins:
            entry = {
                key: value
                for key, value in (
                    ("config", plugin.configuration(route.name)),
                    ("metadata", plugin.route_metadata(self, route)),
                )
                if value
            }
            if entry:
                described[plugin.name] = entry
        return {"plugins": described} if described else {}
