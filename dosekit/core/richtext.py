"""
Rich-text documents (DOCX, HTML) -> flat list of top-level BlockNodes.

The walk that turns nodes into doses lives in blocks.py; this module only knows
about the source formats.
"""
from __future__ import annotations

import base64
import io
import re
from dataclasses import dataclass, field
from typing import Optional

from .models import BlockNode


_RE_HEADING_STYLE = re.compile(r"^heading\s*(\d+)$", re.IGNORECASE)
_RE_HTML_HEADING = re.compile(r"^h([1-6])$")


@dataclass
class RichTextTree:
    nodes: list[BlockNode] = field(default_factory=list)
    raw_text: str = ""
    warnings: list[str] = field(default_factory=list)


# --------------------------------------------------------------------------- DOCX


def _style_name(para) -> str:
    try:
        return (para.style.name or "") if para.style is not None else ""
    except Exception:  # noqa: BLE001
        return ""


def _heading_level(style: str) -> Optional[int]:
    m = _RE_HEADING_STYLE.match(style.strip())
    if not m:
        return None
    level = int(m.group(1))
    return level if 1 <= level <= 6 else None


def _is_list_paragraph(para, style: str) -> bool:
    if style.lower().startswith("list"):
        return True
    ppr = para._p.pPr  # noqa: SLF001
    return ppr is not None and ppr.numPr is not None


def _paragraph_images(para, doc, warnings: list[str]) -> list[BlockNode]:
    nodes: list[BlockNode] = []
    for rel_id in para._p.xpath(".//a:blip/@r:embed"):  # noqa: SLF001
        try:
            part = doc.part.related_parts[rel_id]
            content_type = getattr(part, "content_type", "") or "image/unknown"
            b64 = base64.b64encode(part.blob).decode("ascii")
        except Exception as e:  # noqa: BLE001
            warnings.append(f"Could not read an embedded image ({rel_id}): {e}")
            continue
        nodes.append(BlockNode(kind="image", image_src=f"data:{content_type};base64,{b64}"))
    return nodes


def _table_text(table) -> str:
    rows: list[str] = []
    for row in table.rows:
        cells = [cell.text.strip() for cell in row.cells]
        if any(cells):
            rows.append(" | ".join(cells))
    return "\n".join(rows)


def docx_to_tree(data: bytes) -> RichTextTree:
    """
    Parse DOCX bytes with python-docx. Raises whatever python-docx raises on a
    broken package; callers map that to DocumentUnreadableError.
    """
    from docx import Document
    from docx.oxml.ns import qn
    from docx.table import Table
    from docx.text.paragraph import Paragraph

    doc = Document(io.BytesIO(data))
    tree = RichTextTree()
    text_parts: list[str] = []
    open_list: Optional[BlockNode] = None

    for child in doc.element.body.iterchildren():
        if child.tag == qn("w:tbl"):
            open_list = None
            text = _table_text(Table(child, doc))
            if text:
                tree.nodes.append(BlockNode(kind="other", text=text))
                text_parts.append(text)
            continue
        if child.tag != qn("w:p"):
            continue

        para = Paragraph(child, doc)
        style = _style_name(para)
        text = para.text.strip()
        if text:
            text_parts.append(text)

        level = _heading_level(style)
        if level is not None:
            open_list = None
            tree.nodes.append(BlockNode(kind="heading", text=text, level=level))
            continue

        if text and _is_list_paragraph(para, style):
            ordered = "number" in style.lower()
            if open_list is None or open_list.ordered != ordered:
                open_list = BlockNode(kind="list", ordered=ordered)
                tree.nodes.append(open_list)
            open_list.items.append(text)
        else:
            open_list = None
            if text:
                tree.nodes.append(BlockNode(kind="paragraph", text=text))

        images = _paragraph_images(para, doc, tree.warnings)
        if images:
            open_list = None
            tree.nodes.extend(images)

    tree.raw_text = "\n\n".join(text_parts)
    return tree


# --------------------------------------------------------------------------- HTML


def html_to_tree(html: str) -> RichTextTree:
    from bs4 import BeautifulSoup, Tag

    soup = BeautifulSoup(html, "lxml")
    tree = RichTextTree()
    body = soup.find("body")
    if body is None:
        return tree

    for element in body.children:
        if not isinstance(element, Tag):
            continue
        name = element.name.lower()
        m = _RE_HTML_HEADING.match(name)
        if m:
            tree.nodes.append(BlockNode(kind="heading", text=element.get_text().strip(), level=int(m.group(1))))
        elif name == "p":
            tree.nodes.append(BlockNode(kind="paragraph", text=element.get_text()))
        elif name in ("ul", "ol"):
            items = [li.get_text() for li in element.find_all("li", recursive=False)]
            tree.nodes.append(BlockNode(kind="list", items=items, ordered=name == "ol"))
        elif name == "img":
            tree.nodes.append(BlockNode(kind="image", image_src=element.get("src") or ""))
        else:
            tree.nodes.append(BlockNode(kind="other", text=element.get_text()))

    tree.raw_text = body.get_text()
    return tree
