"""Exception hierarchy for hazelroute.

Registration and middleware failures are raised internally and recorded by the
router as diagnostics; they only escape to callers of a router built with
``strict=True``.
"""

from __future__ import annotations

__all__ = [
    "HazelRouteError",
    "RegistrationError",
    "ResolutionError",
    "PatternError",
    "MiddlewareError",
]


class HazelRouteError(Exception):
    """Base class for every error raised by hazelroute."""


class RegistrationError(HazelRouteError):
    """A route could not be added to the table."""


class ResolutionError(RegistrationError):
    """A declarative handler reference could not be turned into a callable."""


class PatternError(RegistrationError):
    """A URI template does not compile into a usable pattern."""


class MiddlewareError(HazelRouteError):
    """A middleware could not be registered or found at dispatch time."""
