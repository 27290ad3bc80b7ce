"""Character style descriptors: describe a character as tags, apply tags back to a character.

Descriptor format (one character, ';'-joined, each tag parsed independently):

    b;i;u;size:12.00;color:255,0,0;opacity:0.50;font:Arial-Bold

Colour tags are mutually exclusive: color:r,g,b | cmykcolor:c,m,y,k | graycolor:g |
spotcolor:<name>,<tint>. A missing tag means "unspecified", never "cleared".
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Sequence

from .host import Character, HostError, StyleCatalog
from .models import (
    FLAG_KINDS,
    CMYKColor,
    Color,
    GrayColor,
    RGBColor,
    SpotColor,
    StyleTag,
    TagKind,
)

_logger = logging.getLogger(__name__)

_VALUE_KINDS = {kind.value: kind for kind in TagKind if kind not in FLAG_KINDS and kind is not TagKind.UNKNOWN}
_FLAG_BY_TEXT = {kind.value: kind for kind in FLAG_KINDS}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _read(character: Character, attr: str) -> Any:
    try:
        return getattr(character, attr)
    except HostError as e:
        _logger.debug("Cannot read %s: %s", attr, e)
        return None


def color_tag(color: Color) -> StyleTag | None:
    if isinstance(color, RGBColor):
        channels = (color.red, color.green, color.blue)
        return StyleTag(TagKind.RGB_COLOR, ",".join(str(_round_half_up(c)) for c in channels))
    if isinstance(color, CMYKColor):
        channels = (color.cyan, color.magenta, color.yellow, color.black)
        return StyleTag(TagKind.CMYK_COLOR, ",".join(f"{c:.2f}" for c in channels))
    if isinstance(color, GrayColor):
        return StyleTag(TagKind.GRAY_COLOR, f"{color.gray:.2f}")
    if isinstance(color, SpotColor):
        tint = "100.00" if color.tint is None else f"{color.tint:.2f}"
        return StyleTag(TagKind.SPOT_COLOR, f"{color.spot.name},{tint}")
    return None


def describe(character: Character) -> list[StyleTag]:
    """Describe the visually relevant attributes of one character.

    Every attribute is read on its own; a host failure on one of them drops that tag only.
    """
    tags: list[StyleTag] = []

    font = _read(character, "font")
    if font is not None:
        if font.is_bold:
            tags.append(StyleTag(TagKind.BOLD))
        if font.is_italic:
            tags.append(StyleTag(TagKind.ITALIC))

    if _read(character, "underline"):
        tags.append(StyleTag(TagKind.UNDERLINE))

    size = _read(character, "size")
    if size:
        tags.append(StyleTag(TagKind.SIZE, f"{size:.2f}"))

    fill = _read(character, "fill_color")
    if fill is not None:
        tag = color_tag(fill)
        if tag is not None:
            tags.append(tag)

    opacity = _read(character, "opacity")
    if opacity and opacity != 100:
        tags.append(StyleTag(TagKind.OPACITY, f"{opacity / 100:.2f}"))

    if font is not None and font.name:
        tags.append(StyleTag(TagKind.FONT, font.name))

    return tags


def format_descriptor(tags: Sequence[StyleTag]) -> str:
    return ";".join(str(tag) for tag in tags)


def parse_tag(raw: str) -> StyleTag | None:
    text = raw.strip()
    if not text:
        return None
    if text in _FLAG_BY_TEXT:
        return StyleTag(_FLAG_BY_TEXT[text])
    prefix, sep, value = text.partition(":")
    kind = _VALUE_KINDS.get(prefix) if sep else None
    if kind is None:
        return StyleTag(TagKind.UNKNOWN, text)
    return StyleTag(kind, value)


def parse_descriptor(text: str | None) -> list[StyleTag]:
    if not text:
        return []
    tags = (parse_tag(part) for part in text.split(";"))
    return [tag for tag in tags if tag is not None]


def _channels(value: str, count: int) -> list[float] | None:
    parts = value.split(",")
    if len(parts) < count:
        return None
    return [float(p) for p in parts[:count]]


def _apply_bold(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    name = ch.font.name
    if "Bold" in name:
        return
    target = name.replace("Regular", "Bold", 1).replace("Italic", "Bold Italic", 1)
    if target != name:
        ch.font = catalog.find_font(target)


def _apply_italic(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    name = ch.font.name
    if "Italic" in name or "Oblique" in name:
        return
    target = name.replace("Regular", "Italic", 1).replace("Bold", "Bold Italic", 1)
    if target != name:
        ch.font = catalog.find_font(target)


def _apply_underline(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    ch.underline = True


def _apply_size(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    ch.size = float(tag.value)


def _apply_rgb(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    parts = _channels(tag.value, 3)
    if parts is not None:
        ch.fill_color = RGBColor(*parts)


def _apply_cmyk(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    parts = _channels(tag.value, 4)
    if parts is not None:
        ch.fill_color = CMYKColor(*parts)


def _apply_gray(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    ch.fill_color = GrayColor(float(tag.value))


def _apply_spot(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    # Spot names may contain commas; the tint is always after the last one.
    comma = tag.value.rfind(",")
    if comma <= 0:
        return
    tint = float(tag.value[comma + 1 :])
    spot = catalog.find_spot(tag.value[:comma])
    ch.fill_color = SpotColor(spot, tint)


def _apply_opacity(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    ch.opacity = float(tag.value) * 100


def _apply_font(ch: Character, tag: StyleTag, catalog: StyleCatalog) -> None:
    ch.font = catalog.find_font(tag.value)


_APPLIERS: dict[TagKind, Callable[[Character, StyleTag, StyleCatalog], None]] = {
    TagKind.BOLD: _apply_bold,
    TagKind.ITALIC: _apply_italic,
    TagKind.UNDERLINE: _apply_underline,
    TagKind.SIZE: _apply_size,
    TagKind.RGB_COLOR: _apply_rgb,
    TagKind.CMYK_COLOR: _apply_cmyk,
    TagKind.GRAY_COLOR: _apply_gray,
    TagKind.SPOT_COLOR: _apply_spot,
    TagKind.OPACITY: _apply_opacity,
    TagKind.FONT: _apply_font,
}


def apply_descriptor(character: Character, tags: Sequence[StyleTag], catalog: StyleCatalog) -> list[StyleTag]:
    """Apply parsed tags to one character and return the tags that could not be applied.

    Host lookups (fonts, spots), unsupported attributes and malformed numbers only skip
    their own tag. Any other exception is a host fault and propagates.
    """
    skipped: list[StyleTag] = []
    for tag in tags:
        applier = _APPLIERS.get(tag.kind)
        if applier is None:
            continue
        try:
            applier(character, tag, catalog)
        except (HostError, ValueError) as e:
            _logger.debug("Style tag %s skipped: %s", tag, e)
            skipped.append(tag)
    return skipped
