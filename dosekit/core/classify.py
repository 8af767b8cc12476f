from __future__ import annotations

import re
from typing import Optional

from .models import DecomposeConfig, TextElement
from .reconstruct import is_bold_font


# Bullet glyphs, "N." or "a)" followed by whitespace.
RE_LIST_ITEM = re.compile(r"^\s*([•●▪•*-]|\d+\.|\w\))\s")
_RE_SENTENCE_END = re.compile(r"[.!?]$")


def is_list_item(text: str) -> bool:
    return RE_LIST_ITEM.match(text.strip()) is not None


def is_likely_heading(line: TextElement, cfg: DecomposeConfig) -> bool:
    """
    Geometric/stylistic heading test for page-based lines.

    All must hold: not a list item, 2 < length < max chars, fewer than max words,
    no sentence punctuation at the end, and either a bold-like font or a line that
    starts left of the margin.
    """
    t = line.text.strip()
    if is_list_item(t):
        return False
    if not (2 < len(t) < cfg.max_heading_chars):
        return False
    if len(t.split(" ")) >= cfg.max_heading_words:
        return False
    if _RE_SENTENCE_END.search(t):
        return False
    return is_bold_font(line.font_name) or line.x < cfg.left_margin


def starts_new_block(
    line: TextElement,
    prev: Optional[tuple[float, float]],
    cfg: DecomposeConfig,
) -> bool:
    """
    `prev` is (y, height) of the previous text line, or None after a page start / image.
    """
    if prev is None:
        return True
    prev_y, prev_height = prev
    gap = (prev_y - prev_height) - line.y
    return gap > line.height * cfg.gap_ratio
