from __future__ import annotations

from dataclasses import dataclass, field

from .models import Dose, HeadingPathEntry


BREADCRUMB_SEPARATOR = " > "


@dataclass
class HeadingStack:
    """
    Ancestor chain of currently open headings.

    Entries are kept strictly increasing in depth: pushing a heading first drops
    every open heading at the same depth or shallower.

    Two ways to express depth:
      - explicit levels (Markdown "#" count, DOCX/HTML h1..h6): depth == level
      - glyph height (PDF): taller text is a higher-level heading, depth == -height
    """

    entries: list[HeadingPathEntry] = field(default_factory=list)

    def push(self, depth: float, text: str) -> None:
        while self.entries and self.entries[-1].depth >= depth:
            self.entries.pop()
        self.entries.append(HeadingPathEntry(depth=depth, text=text))

    def push_level(self, level: int, text: str) -> None:
        self.push(float(level), text)

    def push_height(self, height: float, text: str) -> None:
        self.push(-float(height), text)

    def breadcrumb(self) -> str:
        return BREADCRUMB_SEPARATOR.join(e.text for e in self.entries)

    def dose(self, body: str) -> Dose:
        return Dose(body=body, breadcrumb=self.breadcrumb() or None)

    def render(self, body: str) -> str:
        return self.dose(body).render()

    def __len__(self) -> int:
        return len(self.entries)
