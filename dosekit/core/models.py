from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union


PaintOpName = Literal["save", "restore", "transform", "paint_image"]
BlockKind = Literal["heading", "paragraph", "list", "image", "other"]


@dataclass(frozen=True)
class DecomposeConfig:
    """Heuristic thresholds used by the classifier and outline decomposer."""

    indent_width: float = 8.0  # ~ one space in PDF units
    left_margin: float = 80.0
    gap_ratio: float = 0.8
    max_heading_chars: int = 100
    max_heading_words: int = 15
    split_list_items: bool = False
    pdf_image_alt: str = "PDF image"
    rich_text_image_alt: str = "Document image"


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float  # baseline, PDF space (grows upward)
    height: float
    font_name: Optional[str] = None


@dataclass(frozen=True)
class PaintOp:
    op: PaintOpName
    args: tuple = ()


@dataclass(frozen=True)
class RasterImage:
    width: int
    height: int
    data: bytes
    colorspace: Optional[str] = None


@dataclass(frozen=True)
class TextElement:
    text: str
    x: float
    y: float
    height: float
    font_name: Optional[str] = None


@dataclass(frozen=True)
class ImageElement:
    data_uri: str
    y: float
    width: int
    height: int


PositionedElement = Union[TextElement, ImageElement]


@dataclass(frozen=True)
class HeadingPathEntry:
    depth: float  # larger == deeper
    text: str


@dataclass(frozen=True)
class Dose:
    body: str
    breadcrumb: Optional[str] = None

    def render(self) -> str:
        if self.breadcrumb:
            return f"{self.breadcrumb}\n\n{self.body}"
        return self.body


@dataclass(frozen=True)
class OutlineLine:
    text: str
    x: float
    y: float = 0.0


@dataclass
class BlockNode:
    kind: BlockKind
    text: str = ""
    level: int = 0  # headings only (1..6)
    items: list[str] = field(default_factory=list)
    ordered: bool = False
    image_src: Optional[str] = None


@dataclass
class PageContent:
    page_number: int  # 1-based
    runs: list[TextRun]
    ops: list[PaintOp] = field(default_factory=list)


@dataclass
class DecomposeResult:
    doses: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    outline: Optional[str] = None
    page_count: Optional[int] = None
