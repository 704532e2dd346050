"""Format generated modules with black."""

from __future__ import annotations

import black

from ..errors import GenerationError

DEFAULT_LINE_WIDTH = 120


def format_source(source: str, *, line_width: int = DEFAULT_LINE_WIDTH, name: str | None = None) -> str:
    """Return ``source`` formatted by black at ``line_width`` columns."""
    mode = black.Mode(line_length=line_width)
    try:
        return black.format_str(source, mode=mode)
    except black.InvalidInput as exc:
        label = f"'{name}'" if name else "generated module"
        raise GenerationError(f"Failed to format {label}: {exc}") from exc


__all__ = ["DEFAULT_LINE_WIDTH", "format_source"]
