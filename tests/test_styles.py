from __future__ import annotations

from framexml.memory_host import MemoryCharacter, MemoryDocument
from framexml.models import CMYKColor, GrayColor, RGBColor, Spot, SpotColor, StyleTag, TagKind
from framexml.styles import apply_descriptor, describe, format_descriptor, parse_descriptor, parse_tag

from conftest import BOLD, BOLD_ITALIC, ITALIC, MINION, REGULAR


def _catalog(**kwargs) -> MemoryDocument:
    return MemoryDocument("catalog.ai", fonts=MINION, **kwargs)


def test_describe_orders_tags_and_skips_defaults():
    ch = MemoryCharacter(
        "x",
        font=BOLD_ITALIC,
        size=12.0,
        underline=True,
        fill_color=RGBColor(255, 0, 0),
        opacity=50.0,
    )
    assert format_descriptor(describe(ch)) == "b;i;u;size:12.00;color:255,0,0;opacity:0.50;font:Minion Bold Italic"

    plain = MemoryCharacter("y", font=REGULAR, size=9.5)
    assert format_descriptor(describe(plain)) == "size:9.50;font:Minion Regular"


def test_color_tags_per_color_space():
    spot = Spot("PANTONE 185 C, coated")
    assert str(describe(MemoryCharacter("a", fill_color=CMYKColor(0, 100, 80.5, 5)))[1]) == (
        "cmykcolor:0.00,100.00,80.50,5.00"
    )
    assert str(describe(MemoryCharacter("a", fill_color=GrayColor(40)))[1]) == "graycolor:40.00"
    assert str(describe(MemoryCharacter("a", fill_color=SpotColor(spot, 75)))[1]) == (
        "spotcolor:PANTONE 185 C, coated,75.00"
    )
    assert str(describe(MemoryCharacter("a", fill_color=RGBColor(10.5, 0.4, 254.6)))[1]) == "color:11,0,255"


def test_parse_descriptor_keeps_unknown_tags_and_ignores_blanks():
    tags = parse_descriptor("b; ;size:12.00;sparkle;font:Minion Bold")
    assert tags == [
        StyleTag(TagKind.BOLD),
        StyleTag(TagKind.SIZE, "12.00"),
        StyleTag(TagKind.UNKNOWN, "sparkle"),
        StyleTag(TagKind.FONT, "Minion Bold"),
    ]
    assert parse_descriptor("") == []
    assert parse_tag("nonsense:1") == StyleTag(TagKind.UNKNOWN, "nonsense:1")


def test_describe_apply_describe_is_idempotent():
    catalog = _catalog(spots=[Spot("Gold")])
    source = MemoryCharacter(
        "s",
        font=ITALIC,
        size=14.0,
        underline=True,
        fill_color=SpotColor(Spot("Gold"), 60),
        opacity=80.0,
    )
    descriptor = format_descriptor(describe(source))

    target = MemoryCharacter("t", font=REGULAR, size=10.0)
    skipped = apply_descriptor(target, parse_descriptor(descriptor), catalog)

    assert skipped == []
    assert format_descriptor(describe(target)) == descriptor


def test_cmyk_round_trip_preserves_channels():
    source = MemoryCharacter("c", font=REGULAR, fill_color=CMYKColor(12.5, 0, 100, 33.33))
    target = MemoryCharacter("c", font=REGULAR)
    apply_descriptor(target, describe(source), _catalog())
    assert target.fill_color == CMYKColor(12.5, 0.0, 100.0, 33.33)


def test_bold_and_italic_switch_face_names():
    catalog = _catalog()
    ch = MemoryCharacter("a", font=REGULAR)
    apply_descriptor(ch, parse_descriptor("b"), catalog)
    assert ch.font == BOLD
    apply_descriptor(ch, parse_descriptor("i"), catalog)
    assert ch.font == BOLD_ITALIC


def test_missing_font_or_spot_skips_only_that_tag():
    catalog = _catalog()
    ch = MemoryCharacter("a", font=REGULAR, size=10.0)

    skipped = apply_descriptor(
        ch,
        parse_descriptor("u;size:18.00;spotcolor:Unknown Ink,50.00;opacity:0.25;font:NoSuchFont"),
        catalog,
    )

    assert [str(tag) for tag in skipped] == ["spotcolor:Unknown Ink,50.00", "font:NoSuchFont"]
    assert ch.underline is True
    assert ch.size == 18.0
    assert ch.opacity == 25.0
    assert ch.font == REGULAR
    assert ch.fill_color is None


def test_malformed_numbers_skip_their_tag():
    ch = MemoryCharacter("a", font=REGULAR, size=10.0)
    skipped = apply_descriptor(ch, parse_descriptor("size:big;graycolor:20.00"), _catalog())
    assert [str(tag) for tag in skipped] == ["size:big"]
    assert ch.size == 10.0
    assert ch.fill_color == GrayColor(20.0)
