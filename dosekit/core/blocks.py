from __future__ import annotations

import re
from typing import Iterable, Optional

from .headings import HeadingStack
from .models import BlockNode, DecomposeConfig


NO_STRUCTURE_WARNING = (
    "Could not identify a clear structure (headings, paragraphs); the text was split by paragraphs."
)
NO_TEXT_WARNING = "No text was found in the document."

_RE_BLANK_SPLIT = re.compile(r"\n\s*\n")


def format_list_items(items: Iterable[str], ordered: bool) -> str:
    """`* item` or `N. item` per line; empty items are dropped but keep their number."""
    out: list[str] = []
    for idx, item in enumerate(items):
        content = item.strip()
        if not content:
            continue
        prefix = f"{idx + 1}. " if ordered else "* "
        out.append(prefix + content)
    return "\n".join(out)


def blocks_to_doses(
    nodes: Iterable[BlockNode],
    raw_text: str = "",
    cfg: Optional[DecomposeConfig] = None,
    warnings: Optional[list[str]] = None,
) -> list[str]:
    """
    Walk top-level block nodes of a rich-text document.

    Headings only move the breadcrumb; every other node becomes at most one dose.
    `warnings` collects the fallback notice when no structure could be found.
    """
    cfg = cfg or DecomposeConfig()
    warnings = warnings if warnings is not None else []
    headings = HeadingStack()
    doses: list[str] = []

    def emit(content: str) -> None:
        if content:
            doses.append(headings.render(content))

    for node in nodes:
        if node.kind == "heading":
            text = node.text.strip()
            if text and 1 <= node.level <= 6:
                headings.push_level(node.level, text)
                continue
            if text:
                emit(text)
            continue
        if node.kind == "list":
            emit(format_list_items(node.items, node.ordered))
        elif node.kind == "image":
            src = node.image_src or ""
            if src.startswith("data:image"):
                emit(f"![{cfg.rich_text_image_alt}]({src})")
        else:
            emit(node.text.strip())

    if not doses:
        if raw_text.strip():
            parts = [p.strip() for p in _RE_BLANK_SPLIT.split(raw_text) if p.strip()]
            if parts:
                warnings.append(NO_STRUCTURE_WARNING)
                return parts
        warnings.append(NO_TEXT_WARNING)
    return doses
