"""URI template compiler.

``compile_pattern("/user/{id}/posts/{slug}")`` replaces every ``{name}``
placeholder with a ``([^/]+)`` capture group. Literal text is passed through
verbatim: regex metacharacters in a template keep their regex meaning (``/a.b``
also matches ``/axb``). Matching is anchored at both ends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from .errors import PatternError

__all__ = ["CompiledPattern", "compile_pattern", "PLACEHOLDER_RE", "SEGMENT_GROUP"]

PLACEHOLDER_RE = re.compile(r"\{([^/{}]+)\}")
SEGMENT_GROUP = "([^/]+)"


@dataclass(frozen=True)
class CompiledPattern:
    """Anchored matcher derived from a URI template."""

    template: str
    source: str
    placeholders: Tuple[str, ...]
    regex: Pattern[str]

    def match(self, path: str) -> Optional[Tuple[str, ...]]:
        """Return captured segment values in order, or ``None``."""
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return found.groups()

    def __str__(self) -> str:
        return self.source


def compile_pattern(template: str) -> CompiledPattern:
    if not isinstance(template, str):
        raise PatternError(f"URI template must be a string, got {type(template).__name__}")
    placeholders = tuple(PLACEHOLDER_RE.findall(template))
    source = PLACEHOLDER_RE.sub(lambda _m: SEGMENT_GROUP, template)
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise PatternError(f"URI '{template}' is not a valid pattern: {exc}") from exc
    if regex.groups != len(placeholders):
        raise PatternError(
            f"URI '{template}' declares {len(placeholders)} placeholder(s) "
            f"but compiles to {regex.groups} capture group(s)"
        )
    return CompiledPattern(
        template=template,
        source=source,
        placeholders=placeholders,
        regex=regex,
    )
