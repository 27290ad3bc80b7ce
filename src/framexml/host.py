"""Capability interface over the host document model.

The codec never touches a concrete document library. Hosts expose an ordered
collection of text regions, each an ordered sequence of paragraphs of styled
characters, plus named font and spot lookups.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Sequence

from .models import Bounds, Color, Justification, Spot, TabStop, TextFont, VerticalAlignment


class HostError(Exception):
    """An attribute the host cannot read, write or resolve."""


class FontNotFoundError(HostError):
    pass


class SpotNotFoundError(HostError):
    pass


class UnsupportedAttributeError(HostError):
    pass


PARAGRAPH_BREAKS = ("\r", "\n")


class Character(Protocol):
    contents: str
    font: TextFont
    size: Optional[float]
    underline: bool
    fill_color: Optional[Color]
    opacity: float


class Paragraph(Protocol):
    justification: Optional[Justification]
    tab_stops: Sequence[TabStop]

    def characters(self) -> Sequence[Character]: ...


class TextRegion(Protocol):
    name: str
    layer: str
    bounds: Optional[Bounds]
    vertical_alignment: Optional[VerticalAlignment]

    def paragraphs(self) -> Sequence[Paragraph]: ...

    def characters(self) -> Sequence[Character]:
        """Flattened live character stream, one break character between paragraphs."""
        ...

    def set_contents(self, text: str) -> None:
        """Replace all text; every character is reset to the region's baseline attributes."""
        ...


class StyleCatalog(Protocol):
    def find_font(self, name: str) -> TextFont: ...

    def find_spot(self, name: str) -> Spot: ...


class HostDocument(StyleCatalog, Protocol):
    name: str
    path: Path
    application_version: str

    def text_regions(self) -> Sequence[TextRegion]: ...

    def close(self, save: bool = False) -> None: ...


class DocumentOpener(Protocol):
    def open(self, path: Path) -> HostDocument: ...
