"""Interchange file rendering and parsing.

The file is XML-shaped but never escaped: TEXT and LINE_STYLES are CDATA blocks that may
hold any '<', '>' or '&', and names are written verbatim. Reading therefore uses plain
regex extraction per <ITEM> fragment instead of an XML parser.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from .frame_styles import format_number
from .models import FrameInfo, InterchangeItem, InterchangeMetadata

_ITEM_CLOSE = "</ITEM>"
_TEXT_RE = re.compile(r"<TEXT><!\[CDATA\[(.*?)\]\]></TEXT>", flags=re.DOTALL)
_LINE_STYLES_RE = re.compile(r"<LINE_STYLES><!\[CDATA\[(.*?)\]\]></LINE_STYLES>", flags=re.DOTALL)
_PARA_STYLE_RE = re.compile(r"<PARA_STYLE>([^<]*)</PARA_STYLE>")
_NAME_RE = re.compile(r"<NAME>([^<]*)</NAME>")
_LAYER_RE = re.compile(r"<LAYER>([^<]*)</LAYER>")
_META_RE = {
    "application_version": re.compile(r"<ILLUSTRATOR_VERSION>([^<]*)</ILLUSTRATOR_VERSION>"),
    "export_date": re.compile(r"<EXPORT_DATE>([^<]*)</EXPORT_DATE>"),
    "document_name": re.compile(r"<DOCUMENT_NAME>([^<]*)</DOCUMENT_NAME>"),
    "translation_guide": re.compile(r"<TRANSLATION_GUIDE>([^<]*)</TRANSLATION_GUIDE>"),
}


def interchange_path(document_path: Path, suffix: str = ".xml") -> Path:
    """`poster.docx` -> `poster.docx.xml` in the same folder."""
    return document_path.with_name(document_path.name + suffix)


def _frame_lines(frame: FrameInfo) -> list[str]:
    lines = [
        "    <FRAME_INFO>",
        f"      <NAME>{frame.name}</NAME>",
        f"      <LAYER>{frame.layer}</LAYER>",
    ]
    layout = frame.layout
    if layout is not None:
        lines.append(f"      <FRAME_WIDTH>{format_number(layout.width)}</FRAME_WIDTH>")
        lines.append(f"      <FRAME_HEIGHT>{format_number(layout.height)}</FRAME_HEIGHT>")
        if layout.estimated_max_chars is not None:
            lines.append(f"      <ESTIMATED_MAX_CHARS>{layout.estimated_max_chars}</ESTIMATED_MAX_CHARS>")
        if layout.tab_stops:
            positions = [format_number(p) for p in layout.tab_stops]
            lines.append(f"      <TAB_STOPS>{','.join(positions)}</TAB_STOPS>")
            lines.append(
                "      <TRANSLATION_NOTES>Tab stops at positions: "
                + ", ".join(positions)
                + " points. Keep [TAB] placeholders in translated text to maintain layout.</TRANSLATION_NOTES>"
            )
    lines.append("    </FRAME_INFO>")
    return lines


def render_item(item: InterchangeItem) -> list[str]:
    lines = [f"  <ITEM id='{item.ordinal}'>"]
    if item.frame is not None:
        lines.extend(_frame_lines(item.frame))
    lines.append(f"    <TEXT><![CDATA[{item.text or ''}]]></TEXT>")
    if item.line_styles is not None:
        lines.append(f"    <LINE_STYLES><![CDATA[{item.line_styles}]]></LINE_STYLES>")
    if item.para_style:
        lines.append(f"    <PARA_STYLE>{item.para_style}</PARA_STYLE>")
    lines.append("  </ITEM>")
    return lines


def render_interchange(metadata: InterchangeMetadata, items: Iterable[InterchangeItem]) -> str:
    lines = [
        "<?xml version='1.0' encoding='UTF-8'?><ROOT>",
        "  <METADATA>",
        f"    <ILLUSTRATOR_VERSION>{metadata.application_version}</ILLUSTRATOR_VERSION>",
        f"    <EXPORT_DATE>{metadata.export_date}</EXPORT_DATE>",
        f"    <DOCUMENT_NAME>{metadata.document_name}</DOCUMENT_NAME>",
        f"    <TRANSLATION_GUIDE>{metadata.translation_guide}</TRANSLATION_GUIDE>",
        "  </METADATA>",
    ]
    for item in items:
        lines.extend(render_item(item))
    lines.append("</ROOT>")
    return "\n".join(lines) + "\n"


def write_interchange(path: Path, metadata: InterchangeMetadata, items: Iterable[InterchangeItem]) -> None:
    """Write with a UTF-8 BOM and Windows line endings (also inside LINE_STYLES)."""
    content = render_interchange(metadata, items)
    with path.open("w", encoding="utf-8-sig", newline="\r\n") as f:
        f.write(content)


def read_interchange(path: Path) -> str:
    # Universal newlines turn CRLF back into '\n' so LINE_STYLES split cleanly.
    return path.read_text(encoding="utf-8-sig")


def parse_metadata(content: str) -> InterchangeMetadata | None:
    values: dict[str, str] = {}
    for key, pattern in _META_RE.items():
        m = pattern.search(content)
        values[key] = m.group(1) if m else ""
    if not any(values.values()):
        return None
    return InterchangeMetadata(**values)


def parse_items(content: str) -> list[InterchangeItem]:
    """Split into <ITEM> fragments; a fragment without a TEXT block yields text=None.

    Ordinals count fragments in file order, so a damaged item still occupies its slot.
    """
    items: list[InterchangeItem] = []
    for fragment in content.split(_ITEM_CLOSE):
        if "<ITEM" not in fragment:
            continue
        ordinal = len(items) + 1
        text_m = _TEXT_RE.search(fragment)
        line_m = _LINE_STYLES_RE.search(fragment)
        para_m = _PARA_STYLE_RE.search(fragment)
        name_m = _NAME_RE.search(fragment)
        frame = None
        if name_m is not None:
            layer_m = _LAYER_RE.search(fragment)
            frame = FrameInfo(name=name_m.group(1), layer=layer_m.group(1) if layer_m else "")
        items.append(
            InterchangeItem(
                ordinal=ordinal,
                text=text_m.group(1) if text_m else None,
                line_styles=line_m.group(1) if line_m else None,
                para_style=para_m.group(1) if para_m else None,
                frame=frame,
            )
        )
    return items
