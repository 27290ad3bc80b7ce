from __future__ import annotations

from datetime import datetime, timedelta, timezone

from framexml.config import AppConfig, ExportConfig
from framexml.exporter import build_item, compute_layout, export_document, format_export_date
from framexml.interchange import parse_items, read_interchange
from framexml.memory_host import MemoryCharacter, MemoryDocument, MemoryParagraph, MemoryRegion
from framexml.models import Bounds, DocumentStatus, Justification, TabStop

from conftest import BOLD, MINION, REGULAR

NOW = datetime(2025, 1, 6, 10, 0, 0, tzinfo=timezone(timedelta(hours=1)))


def _never_asked(message: str) -> bool:
    raise AssertionError(f"unexpected prompt: {message}")


def _region(**kwargs) -> MemoryRegion:
    first = MemoryParagraph(
        chars=[MemoryCharacter(ch, font=BOLD, size=10.0) for ch in "Sale\t50%"],
        justification=Justification.CENTER,
        tab_stops=[TabStop(36.0)],
    )
    second = MemoryParagraph(chars=[MemoryCharacter(ch, font=REGULAR, size=10.0) for ch in "today"])
    return MemoryRegion([first, second], bounds=Bounds(0, 0, 120, 40.25), **kwargs)


def test_compute_layout_estimates_capacity_from_first_character():
    layout = compute_layout(_region(), char_width_factor=0.6)
    assert layout.width == 120
    assert layout.height == 40.25
    assert layout.estimated_max_chars == 20
    assert layout.tab_stops == (36.0,)


def test_compute_layout_without_bounds_is_none():
    assert compute_layout(MemoryRegion.from_text("x")) is None


def test_build_item_encodes_text_styles_and_frame():
    item = build_item(_region(name="Badge", layer="Promo"), 3)
    assert item.ordinal == 3
    assert item.text == "Sale[TAB]50%[NEWLINE]today"
    assert item.line_styles == "b;size:10.00;font:Minion Bold\nsize:10.00;font:Minion Regular"
    assert item.para_style == "tabstops:36;halign:center;valign:top"
    assert item.frame.name == "Badge"
    assert item.frame.layer == "Promo"


def test_unnamed_region_gets_positional_name():
    item = build_item(MemoryRegion.from_text("x"), 2)
    assert item.frame.name == "TextFrame_2"


def test_format_export_date():
    assert format_export_date(NOW) == "Mon Jan 06 2025 10:00:00 GMT+0100"


def test_export_document_writes_interchange_next_to_document(tmp_path):
    document = MemoryDocument(tmp_path / "flyer.ai", [_region(), MemoryRegion.from_text("Second")], fonts=MINION)

    report = export_document(document, AppConfig(), _never_asked, now=NOW)

    assert report.status is DocumentStatus.EXPORTED
    assert report.interchange_path == tmp_path / "flyer.ai.xml"
    content = read_interchange(report.interchange_path)
    assert "<DOCUMENT_NAME>flyer.ai</DOCUMENT_NAME>" in content
    assert "<EXPORT_DATE>Mon Jan 06 2025 10:00:00 GMT+0100</EXPORT_DATE>" in content
    assert [item.text for item in parse_items(content)] == ["Sale[TAB]50%[NEWLINE]today", "Second"]


def test_existing_file_declined_is_left_untouched(tmp_path):
    existing = tmp_path / "flyer.ai.xml"
    existing.write_text("keep me", encoding="utf-8")
    document = MemoryDocument(tmp_path / "flyer.ai", [_region()])
    prompts: list[str] = []

    def decline(message: str) -> bool:
        prompts.append(message)
        return False

    report = export_document(document, AppConfig(), decline)

    assert report.status is DocumentStatus.DECLINED
    assert [issue.code for issue in report.issues] == ["overwrite_declined"]
    assert prompts == ['Overwrite existing XML for "flyer.ai"?']
    assert existing.read_text(encoding="utf-8") == "keep me"


def test_overwrite_policy_always_skips_prompt(tmp_path):
    (tmp_path / "flyer.ai.xml").write_text("old", encoding="utf-8")
    document = MemoryDocument(tmp_path / "flyer.ai", [_region()])
    cfg = AppConfig(export=ExportConfig(overwrite="always"))

    report = export_document(document, cfg, _never_asked)

    assert report.status is DocumentStatus.EXPORTED
    assert "<ITEM id='1'>" in read_interchange(tmp_path / "flyer.ai.xml")


def test_document_without_regions_writes_nothing(tmp_path):
    document = MemoryDocument(tmp_path / "empty.ai")
    report = export_document(document, AppConfig(), _never_asked)
    assert report.status is DocumentStatus.NO_REGIONS
    assert [issue.code for issue in report.issues] == ["no_regions"]
    assert not (tmp_path / "empty.ai.xml").exists()
