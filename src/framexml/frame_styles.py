"""Paragraph- and frame-level attributes that apply to a whole region.

Tags (';'-joined, paragraph tags first):

    tabstops:36,72.5;halign:center;valign:bottom
"""

from __future__ import annotations

import logging
import math
from typing import Callable, TypeVar

from .host import HostError, TextRegion
from .models import Justification, TabAlignment, TabStop, VerticalAlignment

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_HALIGN_LABELS = {
    Justification.LEFT: "left",
    Justification.CENTER: "center",
    Justification.RIGHT: "right",
    Justification.FULL_JUSTIFY: "justify",
    Justification.FULL_JUSTIFY_LAST_LINE_LEFT: "justify",
    Justification.FULL_JUSTIFY_LAST_LINE_RIGHT: "justify",
    Justification.FULL_JUSTIFY_LAST_LINE_CENTER: "justify",
}
_HALIGN_VALUES = {
    "left": Justification.LEFT,
    "center": Justification.CENTER,
    "right": Justification.RIGHT,
    "justify": Justification.FULL_JUSTIFY,
}
_VALIGN_LABELS = {v: v.value for v in VerticalAlignment}
_VALIGN_VALUES = {v.value: v for v in VerticalAlignment}


def round_to(value: float, decimals: int = 2) -> float:
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float, decimals: int = 2) -> str:
    """Round and print without trailing zeros: 100.0 -> '100', 12.50 -> '12.5'."""
    text = f"{round_to(value, decimals):.{decimals}f}"
    text = text.rstrip("0").rstrip(".") if "." in text else text
    return "0" if text in ("-0", "") else text


def _safe_read(label: str, reader: Callable[[], T]) -> T | None:
    try:
        return reader()
    except HostError as e:
        _logger.debug("Cannot read %s: %s", label, e)
        return None


def paragraph_tags(region: TextRegion) -> list[str]:
    paragraphs = region.paragraphs()
    if not paragraphs:
        return []
    first = paragraphs[0]
    tags: list[str] = []

    stops = _safe_read("tab stops", lambda: list(first.tab_stops)) or []
    positions = [format_number(ts.position) for ts in stops if ts.position]
    if positions:
        tags.append("tabstops:" + ",".join(positions))

    justification = _safe_read("justification", lambda: first.justification)
    label = _HALIGN_LABELS.get(justification) if justification is not None else None
    if label:
        tags.append(f"halign:{label}")
    return tags


def frame_tags(region: TextRegion) -> list[str]:
    alignment = _safe_read("vertical alignment", lambda: region.vertical_alignment)
    label = _VALIGN_LABELS.get(alignment) if alignment is not None else None
    return [f"valign:{label}"] if label else []


def extract_frame_tags(region: TextRegion) -> list[str]:
    return paragraph_tags(region) + frame_tags(region)


def _for_each_paragraph(region: TextRegion, attr: str, value: object) -> int:
    assigned = 0
    for index, paragraph in enumerate(region.paragraphs()):
        try:
            setattr(paragraph, attr, value)
            assigned += 1
        except HostError as e:
            _logger.debug("Paragraph %d: cannot set %s: %s", index, attr, e)
    return assigned


def apply_frame_tags(region: TextRegion, text: str | None) -> None:
    """Restore tab stops and justification on every paragraph, vertical alignment once."""
    if not text:
        return
    for raw in text.split(";"):
        tag = raw.strip()
        if tag.startswith("tabstops:"):
            try:
                stops = [TabStop(float(p), TabAlignment.LEFT) for p in tag[len("tabstops:") :].split(",")]
            except ValueError:
                _logger.debug("Malformed tab stop tag: %s", tag)
                continue
            _for_each_paragraph(region, "tab_stops", stops)
        elif tag.startswith("halign:"):
            justification = _HALIGN_VALUES.get(tag[len("halign:") :])
            if justification is not None:
                _for_each_paragraph(region, "justification", justification)
        elif tag.startswith("valign:"):
            alignment = _VALIGN_VALUES.get(tag[len("valign:") :])
            if alignment is None:
                continue
            try:
                region.vertical_alignment = alignment
            except HostError as e:
                _logger.debug("Cannot set vertical alignment: %s", e)
