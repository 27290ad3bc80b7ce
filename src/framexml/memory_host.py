"""In-memory host document.

Regions, paragraphs and characters are plain objects; fonts and spots are looked up in
per-document dictionaries. Used as the reference host and in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional

from .host import FontNotFoundError, SpotNotFoundError
from .models import Bounds, Color, Justification, Spot, TabStop, TextFont, VerticalAlignment

DEFAULT_FONT = TextFont(name="ArialMT", family="Arial", style="Regular")


@dataclass
class MemoryCharacter:
    contents: str
    font: TextFont = DEFAULT_FONT
    size: Optional[float] = 12.0
    underline: bool = False
    fill_color: Optional[Color] = None
    opacity: float = 100.0


@dataclass
class MemoryParagraph:
    chars: list[MemoryCharacter] = field(default_factory=list)
    justification: Optional[Justification] = Justification.LEFT
    tab_stops: list[TabStop] = field(default_factory=list)
    # Trailing paragraph break; only part of the region stream between paragraphs.
    mark: MemoryCharacter = field(default_factory=lambda: MemoryCharacter("\r"))

    def characters(self) -> list[MemoryCharacter]:
        return list(self.chars)

    @property
    def text(self) -> str:
        return "".join(ch.contents for ch in self.chars)


class MemoryRegion:
    def __init__(
        self,
        paragraphs: Iterable[MemoryParagraph],
        *,
        name: str = "",
        layer: str = "Layer 1",
        bounds: Bounds | None = None,
        vertical_alignment: VerticalAlignment | None = VerticalAlignment.TOP,
        baseline: MemoryCharacter | None = None,
    ) -> None:
        self._paragraphs = list(paragraphs) or [MemoryParagraph()]
        self.name = name
        self.layer = layer
        self.bounds = bounds
        self.vertical_alignment = vertical_alignment
        if baseline is None:
            first = next((ch for p in self._paragraphs for ch in p.chars), None)
            baseline = replace(first) if first is not None else MemoryCharacter("")
        self.baseline = baseline
        # Paragraph and frame attributes restored by set_contents.
        first_paragraph = self._paragraphs[0]
        self.paragraph_baseline = (first_paragraph.justification, list(first_paragraph.tab_stops))
        self.alignment_baseline = vertical_alignment

    @classmethod
    def from_text(cls, text: str, *, style: MemoryCharacter | None = None, **kwargs) -> MemoryRegion:
        template = style or MemoryCharacter("")
        paragraphs = [
            MemoryParagraph(chars=[replace(template, contents=ch) for ch in line]) for line in text.split("\n")
        ]
        return cls(paragraphs, baseline=replace(template), **kwargs)

    def paragraphs(self) -> list[MemoryParagraph]:
        return list(self._paragraphs)

    def characters(self) -> list[MemoryCharacter]:
        stream: list[MemoryCharacter] = []
        last = len(self._paragraphs) - 1
        for index, paragraph in enumerate(self._paragraphs):
            stream.extend(paragraph.chars)
            if index < last:
                stream.append(paragraph.mark)
        return stream

    @property
    def contents(self) -> str:
        return "\n".join(p.text for p in self._paragraphs)

    def set_contents(self, text: str) -> None:
        justification, tab_stops = self.paragraph_baseline
        if self.vertical_alignment != self.alignment_baseline:
            self.vertical_alignment = self.alignment_baseline
        self._paragraphs = [
            MemoryParagraph(
                chars=[replace(self.baseline, contents=ch) for ch in line],
                justification=justification,
                tab_stops=list(tab_stops),
            )
            for line in text.split("\n")
        ]


class MemoryDocument:
    def __init__(
        self,
        path: Path,
        regions: Iterable[MemoryRegion] = (),
        *,
        fonts: Iterable[TextFont] = (DEFAULT_FONT,),
        spots: Iterable[Spot] = (),
        application_version: str = "memory",
    ) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self.application_version = application_version
        self.regions = list(regions)
        self.fonts = {font.name: font for font in fonts}
        self.spots = {spot.name: spot for spot in spots}
        self.closed = False
        self.saved = False

    def text_regions(self) -> list[MemoryRegion]:
        return list(self.regions)

    def find_font(self, name: str) -> TextFont:
        try:
            return self.fonts[name]
        except KeyError:
            raise FontNotFoundError(f"Font not found: {name}") from None

    def find_spot(self, name: str) -> Spot:
        try:
            return self.spots[name]
        except KeyError:
            raise SpotNotFoundError(f"Spot colour not found: {name}") from None

    def close(self, save: bool = False) -> None:
        self.closed = True
        self.saved = save


class MemoryOpener:
    """Opens pre-built documents by path; unknown paths raise FileNotFoundError."""

    def __init__(self, documents: Iterable[MemoryDocument] = ()) -> None:
        self.documents = {doc.path.resolve(): doc for doc in documents}
        self.opened: list[Path] = []

    def open(self, path: Path) -> MemoryDocument:
        key = Path(path).resolve()
        if key not in self.documents:
            raise FileNotFoundError(f"No in-memory document for {path}")
        self.opened.append(key)
        return self.documents[key]
