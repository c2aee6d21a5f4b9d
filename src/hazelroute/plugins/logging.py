"""Logging plugin (source of truth).

Responsibilities
----------------
- Wrap each handler call and emit configurable messages:
  * ``before`` (default True): ``"{route.name} start"``
  * ``after`` (default True): ``"{route.name} end (<ms> ms)"`` with elapsed time
    in milliseconds and ``{elapsed:.2f}`` formatting.
- Sinks:
  * when ``print`` is true → always ``print(message)``;
  * else when ``log`` is true → ``logger.info(message)`` if the logger reports
    handlers via ``hasHandlers()``, otherwise ``print(message)`` so messages are
    not dropped;
  * else → no output.
- ``enabled`` gates the plugin entirely (default True).
- Uses a provided ``logging.Logger`` (default ``logging.getLogger("hazelroute")``).

Configuration
-------------
Accepted keys (router-level or per route): ``enabled``, ``before``, ``after``,
``log``, ``print``. Pass them to ``plug("logging", ...)``, to
``router.logging.configure(...)`` or per route with
``configure(_target="GET /hello", before=False)``; ``flags`` strings such as
``"before:off,after:on"`` are parsed by ``BasePlugin``.

Exceptions raised by the handler propagate; the end message is skipped.

Registration
------------
At import the plugin registers itself as ``"logging"``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from hazelroute.core.router import Router
from hazelroute.core.table import Route
from hazelroute.plugins._base_plugin import BasePlugin


_DEFAULTS = {"enabled": True, "before": True, "after": True, "log": True, "print": False}


class LoggingPlugin(BasePlugin):
    """Announces each handler call and how long it took."""

    plugin_code = "logging"
    plugin_description = "Logs route handler calls with elapsed time"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **config):
        self._logger = logger or logging.getLogger("hazelroute")
        super().__init__(router, **config)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002
    ):
        """Options are stored by the BasePlugin wrapper."""

    def route_options(self, route_name: str) -> dict:
        """Effective boolean options for ``route_name``."""
        stored = self.configuration(route_name)
        return {
            key: default if stored.get(key) is None else bool(stored[key])
            for key, default in _DEFAULTS.items()
        }

    def _emit(self, message: str, options: dict) -> None:
        if options["print"]:
            print(message)
        elif options["log"]:
            if self._logger.hasHandlers():
                self._logger.info(message)
            else:
                print(message)

    def wrap_handler(self, router, route: Route, call_next: Callable):
        def timed(*args, **kwargs):
            options = self.route_options(route.name)
            if not options["enabled"]:
                return call_next(*args, **kwargs)
            if options["before"]:
                self._emit(f"{route.name} start", options)
            started = time.perf_counter()
            value = call_next(*args, **kwargs)
            if options["after"]:
                elapsed_ms = (time.perf_counter() - started) * 1000
                self._emit(f"{route.name} end ({elapsed_ms:.2f} ms)", options)
            return value

        return timed


Router.register_plugin(LoggingPlugin)
