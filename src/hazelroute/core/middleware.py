"""Named middleware registry."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

__all__ = ["MiddlewareRegistry"]


class MiddlewareRegistry:
    """Mapping from middleware name to an already-resolved callable.

    Names are unique per router; adding a name twice overwrites the first
    callable. Resolution of declarative references happens in the router
    before ``add`` is called.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: Dict[str, Callable] = {}

    def add(self, name: str, handler: Callable) -> None:
        self._entries[name] = handler

    def get(self, name: str) -> Optional[Callable]:
        return self._entries.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
