"""hazelroute public API surface.

- Public exports: ``Router``, ``BaseRouter``, decorator helper ``route``, the
  dispatch result types and the exception hierarchy.
- Plugin registration: built-in plugins (``logging``, ``pydantic``) are
  imported for their side effect of calling ``Router.register_plugin``.
  Imports go through ``import_module`` to avoid cycles.
- ``__version__`` lives here for packaging tools.
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    BaseRouter,
    DispatchOutcome,
    DispatchResult,
    HazelRouteError,
    MiddlewareError,
    PatternError,
    Registration,
    RegistrationError,
    ResolutionError,
    Route,
    Router,
    XmlDocument,
    compile_pattern,
    route,
)

for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "Router",
    "BaseRouter",
    "Registration",
    "route",
    "Route",
    "compile_pattern",
    "DispatchOutcome",
    "DispatchResult",
    "XmlDocument",
    "HazelRouteError",
    "RegistrationError",
    "ResolutionError",
    "PatternError",
    "MiddlewareError",
]
