"""Core runtime aggregator.

Exposes the runtime building blocks from a single module; importing it does not
register plugins or instantiate routers.
"""

from .base_router import BaseRouter, Registration
from .decorators import route
from .diagnostics import Diagnostic, Diagnostics
from .dispatcher import DispatchOutcome, DispatchResult, Dispatcher
from .errors import (
    HazelRouteError,
    MiddlewareError,
    PatternError,
    RegistrationError,
    ResolutionError,
)
from .pattern import CompiledPattern, compile_pattern
from .resolver import resolve
from .router import Router
from .sitemap import SitemapConfig, XmlDocument, generate_sitemap
from .table import Route, RouteTable

__all__ = [
    "BaseRouter",
    "Router",
    "Registration",
    "route",
    "Route",
    "RouteTable",
    "CompiledPattern",
    "compile_pattern",
    "resolve",
    "Dispatcher",
    "DispatchOutcome",
    "DispatchResult",
    "Diagnostic",
    "Diagnostics",
    "SitemapConfig",
    "XmlDocument",
    "generate_sitemap",
    "HazelRouteError",
    "RegistrationError",
    "ResolutionError",
    "PatternError",
    "MiddlewareError",
]
