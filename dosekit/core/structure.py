from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .classify import is_likely_heading, is_list_item, starts_new_block
from .headings import HeadingStack
from .models import DecomposeConfig, ImageElement, PositionedElement, TextElement


def fold_block_text(lines: list[str]) -> str:
    """
    Turn a block's lines into dose text.

    Blocks where list items are at least half of the lines keep one item per line.
    Anything else is prose: lines are joined with a space, and a trailing hyphen
    glues the next line on directly ("exam-" + "ple" -> "example").
    """
    if not lines:
        return ""
    list_count = sum(1 for ln in lines if is_list_item(ln))
    if list_count > 0 and list_count >= len(lines) / 2:
        return "\n".join(ln.strip() for ln in lines)

    acc = ""
    for raw in lines:
        t = raw.strip()
        acc_t = acc.strip()
        if acc_t.endswith("-"):
            acc = acc_t[:-1] + t
        elif acc == "":
            acc = t
        else:
            acc = acc + " " + t
    return acc.strip()


@dataclass
class BlockFinalizer:
    """
    Accumulates body lines and emits doses at structural boundaries.

    One instance per document: the heading stack survives page breaks.
    """

    headings: HeadingStack = field(default_factory=HeadingStack)
    doses: list[str] = field(default_factory=list)
    block: list[str] = field(default_factory=list)

    def add_line(self, text: str) -> None:
        self.block.append(text)

    def finalize(self) -> None:
        if not self.block:
            return
        text = fold_block_text(self.block)
        self.block = []
        if text:
            self.doses.append(self.headings.render(text))

    def add_image(self, data_uri: str, alt: str) -> None:
        self.finalize()
        self.doses.append(self.headings.render(f"![{alt}]({data_uri})"))


@dataclass
class PageStructureBuilder:
    """
    Classifier loop over positioned elements, page after page.

    Headings open at a new block are pushed onto the stack (compared by glyph
    height); everything else lands in the open block.
    """

    cfg: DecomposeConfig = field(default_factory=DecomposeConfig)
    finalizer: BlockFinalizer = field(default_factory=BlockFinalizer)

    def feed_page(self, elements: Iterable[PositionedElement]) -> None:
        prev: Optional[tuple[float, float]] = None
        for el in elements:
            if isinstance(el, ImageElement):
                self.finalizer.add_image(el.data_uri, self.cfg.pdf_image_alt)
                prev = None
                continue
            prev = self._feed_line(el, prev)
        self.finalizer.finalize()

    def _feed_line(self, line: TextElement, prev: Optional[tuple[float, float]]) -> tuple[float, float]:
        new_block = starts_new_block(line, prev, self.cfg)
        if new_block and is_likely_heading(line, self.cfg):
            self.finalizer.finalize()
            self.finalizer.headings.push_height(line.height, line.text.strip())
            return (line.y, line.height)

        if new_block:
            self.finalizer.finalize()
        self.finalizer.add_line(line.text)
        return (line.y, line.height)

    @property
    def doses(self) -> list[str]:
        return self.finalizer.doses


def decompose_pages(
    pages: Iterable[Iterable[PositionedElement]],
    cfg: Optional[DecomposeConfig] = None,
) -> list[str]:
    builder = PageStructureBuilder(cfg=cfg or DecomposeConfig())
    for elements in pages:
        builder.feed_page(elements)
    return builder.doses
