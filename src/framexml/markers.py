from __future__ import annotations

from typing import Iterable

from .host import PARAGRAPH_BREAKS

TAB_MARKER = "[TAB]"
NEWLINE_MARKER = "[NEWLINE]"

# Control codes that carry no modelled attribute and cannot be reproduced on import.
_DROPPED_CODES = frozenset([*range(0x00, 0x09), 0x0B, 0x0C, *range(0x0E, 0x20), 0x7F])


def _encode_glyph(glyph: str) -> str:
    if not glyph or glyph in PARAGRAPH_BREAKS:
        return ""
    if ord(glyph[0]) in _DROPPED_CODES:
        return ""
    if glyph == "\t":
        return TAB_MARKER
    return glyph


def encode_paragraphs(paragraphs: Iterable[Iterable[str]]) -> str:
    """Flatten paragraph glyphs into one marker-annotated string.

    Each paragraph is an iterable of glyphs (a plain string works). Paragraphs are
    joined with [NEWLINE], tabs become [TAB], break and control characters are dropped.
    """
    return NEWLINE_MARKER.join("".join(_encode_glyph(g) for g in glyphs) for glyphs in paragraphs)


def decode_lines(text: str) -> list[str]:
    """Split marker text into per-paragraph lines (still containing [TAB])."""
    return text.split(NEWLINE_MARKER)


def expand_markers(text: str) -> str:
    return text.replace(TAB_MARKER, "\t").replace(NEWLINE_MARKER, "\n")


def line_length(line: str) -> int:
    """Live character count of one decoded line ([TAB] counts as one character)."""
    return len(line.replace(TAB_MARKER, "\t"))
