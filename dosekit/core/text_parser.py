"""
Format-agnostic decomposition of plain text, Markdown and outline text.

Two shapes are recognised:
  - indentation outline: any indented line switches the whole input to branch mode
  - heading outline: "#"-prefixed Markdown headings and blank-line separated blocks

Whatever happens, non-empty input yields at least one dose.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from .classify import is_list_item
from .headings import HeadingStack
from .utils import leading_whitespace_width, normalize_newlines


_RE_MD_HEADING = re.compile(r"^(#+)\s")
_RE_BLANK_SPLIT = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class _IndentedLine:
    text: str
    indent: int


def _indent_of(line: str) -> int:
    # Whitespace-only lines are separators, not indentation. Inside an outline a
    # blank line therefore sits at depth 0 and becomes the nearest ancestor of the
    # branch below it, cutting that branch off from the lines above the gap.
    if not line.strip():
        return 0
    return leading_whitespace_width(line)


def parse_indented_outline(lines: list[str]) -> list[str]:
    """
    One dose per branch. A branch starts at every line with the smallest non-zero
    indentation and runs until the next such line; it is prefixed with its ancestors
    (walking upward, each line shallower than the last one captured).
    """
    data = [_IndentedLine(text=ln, indent=_indent_of(ln)) for ln in lines]
    indented = [d.indent for d in data if d.indent > 0]
    if not indented:
        return list(lines)
    branch_indent = min(indented)
    starts = [i for i, d in enumerate(data) if d.indent == branch_indent]

    doses: list[str] = []
    for n, start in enumerate(starts):
        end = starts[n + 1] if n + 1 < len(starts) else len(data)
        branch = [d.text for d in data[start:end]]

        ancestors: list[str] = []
        current = data[start].indent
        for j in range(start - 1, -1, -1):
            if data[j].indent < current:
                ancestors.insert(0, data[j].text)
                current = data[j].indent
        doses.append("\n".join(ancestors + branch))
    return doses


def markdown_heading_level(line: str) -> int:
    m = _RE_MD_HEADING.match(line.strip())
    return len(m.group(1)) if m else 0


def parse_heading_outline(lines: list[str], split_list_items: bool = False) -> list[str]:
    doses: list[str] = []
    headings = HeadingStack()
    buffer: list[str] = []

    def flush() -> None:
        content = "\n".join(buffer).strip()
        buffer.clear()
        if not content:
            return
        for block in _RE_BLANK_SPLIT.split(content):
            if not block.strip():
                continue
            block_lines = block.split("\n")
            if split_list_items and all(is_list_item(ln) for ln in block_lines):
                items = [ln for ln in block_lines if ln.strip()]
            else:
                items = [block]
            for item in items:
                doses.append(headings.render(item))

    for line in lines:
        level = markdown_heading_level(line)
        if level > 0:
            flush()
            headings.push_level(level, _RE_MD_HEADING.sub("", line.strip(), count=1).strip())
        else:
            buffer.append(line)
    flush()
    return doses


def parse_structured_text(text: str, split_list_items: bool = False) -> list[str]:
    trimmed = normalize_newlines(text or "").strip()
    if not trimmed:
        return []
    lines = trimmed.split("\n")

    if any(_indent_of(ln) > 0 for ln in lines):
        doses = parse_indented_outline(lines)
    else:
        doses = parse_heading_outline(lines, split_list_items=split_list_items)

    return doses or [trimmed]
