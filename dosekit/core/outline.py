"""
Outline (mind-map) rendering for sources where hierarchy is expressed by x offset.

The output is one indented text blob: two spaces per inferred indent level.
It is meant to be fed to parse_structured_text(), which splits it into branches.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from .models import OutlineLine
from .utils import round_half_up


DEFAULT_INDENT_WIDTH = 8.0


def indent_level(x: float, min_indent: float, indent_width: float = DEFAULT_INDENT_WIDTH) -> int:
    if indent_width <= 0:
        return 0
    return max(0, round_half_up((x - min_indent) / indent_width))


def render_outline(lines: Iterable[OutlineLine], indent_width: float = DEFAULT_INDENT_WIDTH) -> str:
    kept = [ln for ln in lines if ln.text.strip()]
    if not kept:
        return ""
    min_indent = min(ln.x for ln in kept)
    return "\n".join("  " * indent_level(ln.x, min_indent, indent_width) + ln.text for ln in kept)


def sort_reading_order(lines: Sequence[OutlineLine]) -> list[OutlineLine]:
    """Top-to-bottom then left-to-right, for sources whose y grows downward (SVG)."""
    return sorted(lines, key=lambda ln: (ln.y, ln.x))
