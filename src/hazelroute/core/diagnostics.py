"""Append-only diagnostics collector.

Two channels are kept (``general`` for registration/dispatch problems and
``middleware`` for unresolved middleware) and exposed as one combined
sequence: general entries first, then middleware entries, each channel in the
order the entries were recorded. Recording never raises.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

__all__ = ["Diagnostic", "Diagnostics", "GENERAL", "MIDDLEWARE"]

GENERAL = "general"
MIDDLEWARE = "middleware"

logger = logging.getLogger("hazelroute")


@dataclass(frozen=True)
class Diagnostic:
    channel: str
    message: str

    def __str__(self) -> str:
        return self.message


class Diagnostics:
    """Ordered record of non-fatal registration and execution failures."""

    __slots__ = ("_channels",)

    def __init__(self) -> None:
        self._channels: Dict[str, List[Diagnostic]] = {GENERAL: [], MIDDLEWARE: []}

    def record(self, message: str, channel: str = GENERAL) -> Diagnostic:
        entry = Diagnostic(channel=channel, message=str(message))
        self._channels.setdefault(channel, []).append(entry)
        logger.warning("%s", entry.message)
        return entry

    def entries(self, channel: Optional[str] = None) -> Tuple[Diagnostic, ...]:
        if channel is not None:
            return tuple(self._channels.get(channel, ()))
        combined: List[Diagnostic] = []
        for bucket in self._channels.values():
            combined.extend(bucket)
        return tuple(combined)

    def errors(self) -> Tuple[str, ...]:
        """Combined messages, general channel first."""
        return tuple(entry.message for entry in self.entries())

    def has_errors(self) -> bool:
        return any(self._channels.values())

    def render(self) -> List[str]:
        """Combined messages escaped for embedding in HTML."""
        return [html.escape(message) for message in self.errors()]

    def to_html(self) -> Optional[str]:
        items = self.render()
        if not items:
            return None
        return "<h2>Errors:</h2><ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._channels.values())

    def __iter__(self):
        return iter(self.entries())
