from __future__ import annotations

import logging
from itertools import accumulate
from typing import Iterable, Sequence

from .host import PARAGRAPH_BREAKS, Character, Paragraph, StyleCatalog
from .markers import line_length
from .styles import apply_descriptor, describe, format_descriptor, parse_descriptor

_logger = logging.getLogger(__name__)


def paragraph_descriptor(paragraph: Paragraph) -> str:
    """Descriptor of the first character that is not a paragraph break ('' if none)."""
    for ch in paragraph.characters():
        if ch.contents not in PARAGRAPH_BREAKS:
            return format_descriptor(describe(ch))
    return ""


def inherit_empty(descriptors: Iterable[str]) -> list[str]:
    """Fill empty descriptors with the nearest preceding non-empty one."""
    folded = accumulate(descriptors, lambda previous, current: current or previous, initial="")
    return list(folded)[1:]


def extract_line_styles(paragraphs: Iterable[Paragraph]) -> list[str]:
    return inherit_empty(paragraph_descriptor(p) for p in paragraphs)


def serialize_line_styles(descriptors: Sequence[str]) -> str:
    return "\n".join(descriptors)


def parse_line_styles(text: str) -> list[str]:
    return text.split("\n")


def line_ranges(lines: Sequence[str]) -> list[range]:
    """Absolute character ranges of decoded lines in the live text.

    Lengths are measured after [TAB] expansion and one position is reserved for the
    paragraph break between consecutive lines.
    """
    ranges: list[range] = []
    offset = 0
    for line in lines:
        length = line_length(line)
        ranges.append(range(offset, offset + length))
        offset += length + 1
    return ranges


def apply_line_styles(
    characters: Sequence[Character],
    lines: Sequence[str],
    descriptors: Sequence[str],
    catalog: StyleCatalog,
) -> int:
    """Apply one descriptor per decoded line to the matching live characters.

    Lines and descriptors are paired up to the shorter of the two; ranges are clipped
    to the live character count. Returns the number of characters styled.
    """
    count = len(characters)
    styled = 0
    for span, descriptor in zip(line_ranges(lines), descriptors):
        if not span or not descriptor:
            continue
        tags = parse_descriptor(descriptor)
        for index in range(span.start, min(span.stop, count)):
            apply_descriptor(characters[index], tags, catalog)
            styled += 1
    _logger.debug("Styled %d of %d characters", styled, count)
    return styled
