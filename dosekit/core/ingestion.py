from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
from lxml import etree

from .blocks import blocks_to_doses
from .errors import DocumentUnreadableError, PasswordProtectedError
from .models import DecomposeConfig, DecomposeResult, OutlineLine, PageContent, PaintOp, RasterImage, TextRun
from .outline import render_outline, sort_reading_order
from .reconstruct import group_runs_into_lines, reconstruct_page
from .richtext import docx_to_tree, html_to_tree
from .structure import PageStructureBuilder
from .text_parser import parse_structured_text
from .utils import decode_text


PDF_EXTENSIONS: frozenset[str] = frozenset({".pdf"})
SVG_EXTENSIONS: frozenset[str] = frozenset({".svg"})
DOCX_EXTENSIONS: frozenset[str] = frozenset({".docx"})
HTML_EXTENSIONS: frozenset[str] = frozenset({".html", ".htm"})
TEXT_EXTENSIONS: frozenset[str] = frozenset({".md", ".markdown", ".txt"})

SUPPORTED_EXTENSIONS: frozenset[str] = (
    PDF_EXTENSIONS | SVG_EXTENSIONS | DOCX_EXTENSIONS | HTML_EXTENSIONS | TEXT_EXTENSIONS
)

NO_SVG_TEXT_WARNING = "No text elements were found in the SVG."
EMPTY_DOCUMENT_WARNING = "The document has no pages."
NO_CONTENT_WARNING = "No text or images were found in the document."
EMPTY_TEXT_WARNING = "The document is empty."

_RE_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def _page_failed(page_no: int, e: Exception) -> str:
    return f"Failed to process page {page_no}: the page may be corrupt and was skipped ({e})."


# --------------------------------------------------------------------------- PDF


def open_pdf(data: bytes) -> "fitz.Document":
    """
    Open PDF bytes, mapping every failure to the whole-document error category.
    """
    try:
        pdf = fitz.open(stream=data, filetype="pdf")
    except Exception as e:  # noqa: BLE001
        raise DocumentUnreadableError(f"Could not open PDF: {e}") from e
    # Owner-password-only files open with an empty user password.
    if pdf.needs_pass and not pdf.authenticate(""):
        pdf.close()
        raise PasswordProtectedError("This PDF is password protected and cannot be processed.")
    return pdf


def pdf_page_content(page: "fitz.Page", page_no: int) -> PageContent:
    """
    Flatten one PyMuPDF page into text runs and image paint ops.

    PyMuPDF reports y growing downward; runs and image transforms are flipped into
    PDF space so that "top of page" means largest y.
    """
    page_height = page.rect.height
    runs: list[TextRun] = []
    text = page.get_text("dict")
    for block in text.get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                s = span.get("text", "")
                if not s:
                    continue
                ox, oy = span.get("origin", (0.0, 0.0))
                runs.append(
                    TextRun(
                        text=s,
                        x=float(ox),
                        y=page_height - float(oy),
                        height=float(span.get("size", 0.0)),
                        font_name=span.get("font"),
                    )
                )

    ops: list[PaintOp] = []
    for info in page.get_image_info(xrefs=True):
        x0, y0, x1, y1 = info["bbox"]
        ops.extend(
            [
                PaintOp("save"),
                PaintOp("transform", (x1 - x0, 0.0, 0.0, y1 - y0, x0, page_height - y1)),
                PaintOp("paint_image", (info.get("xref", 0),)),
                PaintOp("restore"),
            ]
        )
    return PageContent(page_number=page_no, runs=runs, ops=ops)


def pdf_image_resolver(pdf: "fitz.Document"):
    def resolve(xref: object) -> Optional[RasterImage]:
        if not isinstance(xref, int) or xref <= 0:
            # Inline images have no xref and cannot be looked up.
            return None
        pix = fitz.Pixmap(pdf, xref)
        if pix.colorspace is not None and pix.colorspace.n == 4:
            pix = fitz.Pixmap(fitz.csRGB, pix)
        name = pix.colorspace.name if pix.colorspace is not None else "none"
        return RasterImage(width=pix.width, height=pix.height, data=bytes(pix.samples), colorspace=name)

    return resolve


def decompose_pdf(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    """
    Page-based decomposition: reconstruct -> classify -> heading stack -> finalize.

    A failing page is skipped with a warning; the heading stack carries over pages.
    """
    cfg = cfg or DecomposeConfig()
    warnings: list[str] = []
    builder = PageStructureBuilder(cfg=cfg)

    pdf = open_pdf(data)
    try:
        page_count = pdf.page_count
        resolve = pdf_image_resolver(pdf)
        for i in range(page_count):
            page_no = i + 1
            try:
                content = pdf_page_content(pdf.load_page(i), page_no)
                elements = reconstruct_page(content.runs, content.ops, resolve, page_no, warnings)
            except Exception as e:  # noqa: BLE001
                warnings.append(_page_failed(page_no, e))
                continue
            builder.feed_page(elements)
    finally:
        pdf.close()

    if page_count == 0:
        warnings.append(EMPTY_DOCUMENT_WARNING)
    elif not builder.doses:
        warnings.append(NO_CONTENT_WARNING)
    return DecomposeResult(doses=builder.doses, warnings=warnings, page_count=page_count)


def pdf_outline(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    """Mind-map mode: one indented outline from line x offsets, no image handling."""
    cfg = cfg or DecomposeConfig()
    warnings: list[str] = []
    lines: list[OutlineLine] = []

    pdf = open_pdf(data)
    try:
        page_count = pdf.page_count
        for i in range(page_count):
            page_no = i + 1
            try:
                content = pdf_page_content(pdf.load_page(i), page_no)
                # Mind-map exports often split words into runs: join without spaces.
                for ln in group_runs_into_lines(content.runs, joiner=""):
                    lines.append(OutlineLine(text=ln.text, x=ln.x, y=ln.y))
            except Exception as e:  # noqa: BLE001
                warnings.append(_page_failed(page_no, e))
    finally:
        pdf.close()

    if page_count == 0:
        warnings.append(EMPTY_DOCUMENT_WARNING)
    elif not lines:
        warnings.append(NO_CONTENT_WARNING)
    return DecomposeResult(outline=render_outline(lines, cfg.indent_width), warnings=warnings, page_count=page_count)


# --------------------------------------------------------------------------- SVG


def _svg_coord(raw: Optional[str]) -> float:
    # Leading number only: "12.5px" -> 12.5, "10 20 30" -> 10, garbage -> 0.
    m = _RE_LEADING_FLOAT.match(raw or "")
    return float(m.group(1)) if m else 0.0


def svg_outline(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    cfg = cfg or DecomposeConfig()
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(data, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DocumentUnreadableError(f"Could not parse SVG: {e}") from e

    lines: list[OutlineLine] = []
    for el in root.iter():
        if not isinstance(el.tag, str) or etree.QName(el).localname != "text":
            continue
        text = "".join(el.itertext()).strip()
        if not text:
            continue
        lines.append(OutlineLine(text=text, x=_svg_coord(el.get("x")), y=_svg_coord(el.get("y"))))

    if not lines:
        return DecomposeResult(outline="", warnings=[NO_SVG_TEXT_WARNING])
    return DecomposeResult(outline=render_outline(sort_reading_order(lines), cfg.indent_width))


# --------------------------------------------------------------------------- rich text / plain text


def decompose_docx(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    try:
        tree = docx_to_tree(data)
    except Exception as e:  # noqa: BLE001
        raise DocumentUnreadableError(f"Could not open DOCX: {e}") from e
    warnings = list(tree.warnings)
    doses = blocks_to_doses(tree.nodes, raw_text=tree.raw_text, cfg=cfg, warnings=warnings)
    return DecomposeResult(doses=doses, warnings=warnings)


def decompose_html(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    tree = html_to_tree(decode_text(data))
    warnings = list(tree.warnings)
    doses = blocks_to_doses(tree.nodes, raw_text=tree.raw_text, cfg=cfg, warnings=warnings)
    return DecomposeResult(doses=doses, warnings=warnings)


def decompose_text(data: bytes, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    cfg = cfg or DecomposeConfig()
    doses = parse_structured_text(decode_text(data), split_list_items=cfg.split_list_items)
    return DecomposeResult(doses=doses, warnings=[] if doses else [EMPTY_TEXT_WARNING])


# --------------------------------------------------------------------------- dispatch


def _outline_to_doses(res: DecomposeResult, cfg: DecomposeConfig) -> DecomposeResult:
    if res.outline and res.outline.strip():
        res.doses = parse_structured_text(res.outline, split_list_items=cfg.split_list_items)
    return res


def decompose_bytes(
    data: bytes,
    extension: str,
    mindmap: bool = False,
    cfg: Optional[DecomposeConfig] = None,
) -> DecomposeResult:
    """
    Decompose one document into doses based on its extension.

    `mindmap` switches PDF and DOCX to the indentation-outline pipeline; SVG is
    always an outline source.

    Raises:
        ValueError: unsupported extension
        DocumentUnreadableError / PasswordProtectedError: the document cannot be opened
    """
    cfg = cfg or DecomposeConfig()
    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext

    if ext in PDF_EXTENSIONS:
        if mindmap:
            return _outline_to_doses(pdf_outline(data, cfg), cfg)
        return decompose_pdf(data, cfg)
    if ext in SVG_EXTENSIONS:
        return _outline_to_doses(svg_outline(data, cfg), cfg)
    if ext in DOCX_EXTENSIONS:
        res = decompose_docx(data, cfg)
        if mindmap and res.doses:
            res.outline = "\n".join(res.doses)
            return _outline_to_doses(res, cfg)
        return res
    if ext in HTML_EXTENSIONS:
        return decompose_html(data, cfg)
    if ext in TEXT_EXTENSIONS:
        return decompose_text(data, cfg)
    raise ValueError(f"Unsupported file type: {extension}")


def decompose_file(path: Path, mindmap: bool = False, cfg: Optional[DecomposeConfig] = None) -> DecomposeResult:
    if not path.exists():
        raise FileNotFoundError(str(path))
    return decompose_bytes(path.read_bytes(), path.suffix, mindmap=mindmap, cfg=cfg)
