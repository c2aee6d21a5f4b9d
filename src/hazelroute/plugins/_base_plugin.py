"""Plugin contract used by the Router pipeline.

Source of truth
---------------
``BasePlugin``
    Base class every plugin subclasses. Required class attributes:

    - ``plugin_code`` – unique identifier used for registration (e.g. "logging")
    - ``plugin_description`` – human-readable description

    Constructor: ``BasePlugin(router, **config)``; ``**config`` is passed to
    ``configure()``.

    ``configure(**config)``
        Subclasses declare accepted options through the method signature; the
        base version accepts only ``enabled``. Every declaration is wrapped
        (by ``__init_subclass__`` for subclasses) to:

        - parse ``flags`` (``"enabled,before:off"``) into booleans
        - honour ``_target``: ``"--base--"`` (router-level, default), a route
          name such as ``"GET /user/{id}"``, or several names joined by commas
        - validate the options with ``pydantic.validate_call``
        - write them into the router's plugin store

    ``configuration(route_name=None)``
        Merged configuration: router-level overridden by the per-route bucket.

    Hooks (all optional):

    - ``on_register(router, route)`` – once per registered route
    - ``wrap_handler(router, route, call_next)`` – return a callable with the
      handler's signature; default passthrough
    - ``route_middleware(router, route)`` – extra middleware names run after
      the route's own list; default none
    - ``route_metadata(router, route)`` – dict published by ``members()``

Configuration lives on the router (``router._plugin_info``) so plugins hold no
hidden per-plugin globals.
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from pydantic import validate_call

if TYPE_CHECKING:
    from hazelroute.core.table import Route

__all__ = ["BasePlugin", "BASE_TARGET"]

BASE_TARGET = "--base--"


def _split_targets(target: str) -> List[str]:
    return [name.strip() for name in target.split(",") if name.strip()] or [BASE_TARGET]


def _parse_flags(flags: str) -> Dict[str, bool]:
    """``"enabled,before:off"`` -> ``{"enabled": True, "before": False}``."""
    parsed: Dict[str, bool] = {}
    for token in filter(None, (chunk.strip() for chunk in flags.split(","))):
        key, _, state = token.partition(":")
        parsed[key.strip()] = state.strip().lower() != "off"
    return parsed


def _wrap_configure(declared: Callable) -> Callable:
    """Turn a declared ``configure`` into the validated, storing entry point."""
    checked = validate_call(declared)

    @wraps(declared)
    def configure(
        self: "BasePlugin", *, _target: str = BASE_TARGET, flags: Optional[str] = None, **options: Any
    ) -> None:
        if flags:
            options = {**_parse_flags(flags), **options}
        checked(self, **options)
        for target in _split_targets(_target):
            self._store_config(target, options)

    return configure


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        targets = self._get_store().setdefault(self.name, {})
        targets.setdefault(BASE_TARGET, {"config": {"enabled": True}, "locals": {}})

    def configure(self, enabled: bool = True) -> None:
        """Plugins without options of their own only understand ``enabled``."""

    def _store_config(self, target: str, options: Dict[str, Any]) -> None:
        if options:
            targets = self._get_store().setdefault(self.name, {})
            bucket = targets.setdefault(target, {"config": {}, "locals": {}})
            bucket["config"].update(options)

    def configuration(self, route_name: Optional[str] = None) -> Dict[str, Any]:
        """Router-level config overridden by ``route_name``'s bucket."""
        targets = self._get_store().get(self.name, {})
        merged = dict(targets.get(BASE_TARGET, {}).get("config", {}))
        if route_name:
            merged.update(targets.get(route_name, {}).get("config", {}))
        return merged

    def on_register(self, router: Any, route: "Route") -> None:  # pragma: no cover - default no-op
        """Hook run when a route is stored in the table."""

    def wrap_handler(self, router: Any, route: "Route", call_next: Callable) -> Callable:
        """Wrap handler invocation; default passthrough."""
        return call_next

    def route_middleware(self, router: Any, route: "Route") -> List[str]:
        """Extra middleware names for ``route``; default none."""
        return []

    def route_metadata(self, router: Any, route: "Route") -> Dict[str, Any]:
        return {}

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")


BasePlugin.configure = _wrap_configure(BasePlugin.__dict__["configure"])  # type: ignore[method-assign]
