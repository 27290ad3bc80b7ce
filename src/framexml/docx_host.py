"""python-docx host: every DrawingML text box in the document body is one text region.

Word stores each text box twice (DrawingML in mc:Choice, VML in mc:Fallback); only the
DrawingML copy is exposed so region ordinals stay stable. Character attributes map onto
the owning run, so contents assigned through `set_contents` are written one run per
character and merged back by run properties when the document is saved.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator, Optional

import docx
from docx import Document
from docx.enum.dml import MSO_COLOR_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT, WD_UNDERLINE
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt
from docx.shared import RGBColor as DocxRGBColor
from docx.text.paragraph import Paragraph as DocxParagraph
from docx.text.run import Run

from .host import FontNotFoundError, SpotNotFoundError, UnsupportedAttributeError
from .models import (
    Bounds,
    CMYKColor,
    Color,
    GrayColor,
    Justification,
    RGBColor,
    Spot,
    TabAlignment,
    TabStop,
    TextFont,
    VerticalAlignment,
)

_logger = logging.getLogger(__name__)

_WPS_NS = "http://schemas.microsoft.com/office/word/2010/wordprocessingShape"
_BODY_PR = f"{{{_WPS_NS}}}bodyPr"
_EMU_PER_PT = 12700
_FALLBACK_FAMILY = "Calibri"

_STYLE_SUFFIXES = ("Bold Italic", "Bold Oblique", "Bold", "Italic", "Oblique", "Black", "Regular")

_ANCHOR_TO_VALIGN = {
    "t": VerticalAlignment.TOP,
    "ctr": VerticalAlignment.CENTER,
    "b": VerticalAlignment.BOTTOM,
    "just": VerticalAlignment.JUSTIFY,
    "dist": VerticalAlignment.JUSTIFY,
}
_VALIGN_TO_ANCHOR = {
    VerticalAlignment.TOP: "t",
    VerticalAlignment.CENTER: "ctr",
    VerticalAlignment.BOTTOM: "b",
    VerticalAlignment.JUSTIFY: "just",
}

_ALIGN_TO_JUSTIFICATION = {
    WD_ALIGN_PARAGRAPH.LEFT: Justification.LEFT,
    WD_ALIGN_PARAGRAPH.CENTER: Justification.CENTER,
    WD_ALIGN_PARAGRAPH.RIGHT: Justification.RIGHT,
    WD_ALIGN_PARAGRAPH.JUSTIFY: Justification.FULL_JUSTIFY,
    WD_ALIGN_PARAGRAPH.DISTRIBUTE: Justification.FULL_JUSTIFY,
    WD_ALIGN_PARAGRAPH.JUSTIFY_LOW: Justification.FULL_JUSTIFY,
    WD_ALIGN_PARAGRAPH.JUSTIFY_MED: Justification.FULL_JUSTIFY,
    WD_ALIGN_PARAGRAPH.JUSTIFY_HI: Justification.FULL_JUSTIFY,
    WD_ALIGN_PARAGRAPH.THAI_JUSTIFY: Justification.FULL_JUSTIFY,
}
_JUSTIFICATION_TO_ALIGN = {
    Justification.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Justification.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Justification.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Justification.FULL_JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
    Justification.FULL_JUSTIFY_LAST_LINE_LEFT: WD_ALIGN_PARAGRAPH.JUSTIFY,
}

_TAB_ALIGNMENTS = {
    WD_TAB_ALIGNMENT.LEFT: TabAlignment.LEFT,
    WD_TAB_ALIGNMENT.CENTER: TabAlignment.CENTER,
    WD_TAB_ALIGNMENT.RIGHT: TabAlignment.RIGHT,
    WD_TAB_ALIGNMENT.DECIMAL: TabAlignment.DECIMAL,
}


def _local(tag: Any) -> str:
    return str(tag).split("}")[-1]


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


def font_style_name(bold: bool, italic: bool) -> str:
    if bold and italic:
        return "Bold Italic"
    if bold:
        return "Bold"
    if italic:
        return "Italic"
    return "Regular"


def parse_font_name(name: str) -> TextFont:
    """'Arial Bold Italic' -> TextFont(family='Arial', style='Bold Italic')."""
    raw = " ".join(name.split())
    family, style = raw, "Regular"
    for suffix in _STYLE_SUFFIXES:
        if raw.endswith(" " + suffix):
            family, style = raw[: -len(suffix) - 1].strip(), suffix
            break
    if not family:
        raise FontNotFoundError(f"Font not found: {name!r}")
    return TextFont(name=f"{family} {style}", family=family, style=style)


def _to_docx_rgb(color: Color) -> DocxRGBColor:
    if isinstance(color, RGBColor):
        return DocxRGBColor(_clamp_channel(color.red), _clamp_channel(color.green), _clamp_channel(color.blue))
    if isinstance(color, CMYKColor):
        k = 1 - color.black / 100
        channels = [255 * (1 - c / 100) * k for c in (color.cyan, color.magenta, color.yellow)]
        return DocxRGBColor(*(_clamp_channel(c) for c in channels))
    if isinstance(color, GrayColor):
        # Gray is an ink percentage: 0 is white, 100 is black.
        level = _clamp_channel(255 * (1 - color.gray / 100))
        return DocxRGBColor(level, level, level)
    raise UnsupportedAttributeError(f"DOCX cannot store {type(color).__name__} fills")


def iter_textbox_contents(element: Any) -> Iterator[Any]:
    """Yield <w:txbxContent> nodes in document order, skipping mc:Fallback copies."""
    for node in element.iter(qn("w:txbxContent")):
        if any(_local(ancestor.tag) == "Fallback" for ancestor in node.iterancestors()):
            continue
        yield node


def iter_paragraph_runs(p: Any) -> Iterator[Any]:
    """Yield every <w:r> of a paragraph in order, including runs nested in hyperlinks,
    fields, content controls and tracked insertions. Runs of mc:Fallback copies and of
    text boxes anchored inside the paragraph are skipped.
    """
    for r in p.iter(qn("w:r")):
        nested = False
        for ancestor in r.iterancestors():
            if ancestor is p:
                break
            if _local(ancestor.tag) in ("Fallback", "txbxContent"):
                nested = True
                break
        if not nested:
            yield r


def _drawing_container(content: Any) -> Any | None:
    for ancestor in content.iterancestors():
        if ancestor.tag in (qn("wp:inline"), qn("wp:anchor")):
            return ancestor
    return None


class _ParagraphMark:
    """Paragraph break in the flattened character stream; attribute writes are kept locally."""

    def __init__(self, template: TextFont) -> None:
        self.contents = "\r"
        self.font = template
        self.size: Optional[float] = None
        self.underline = False
        self.fill_color: Optional[Color] = None
        self.opacity = 100.0


class DocxCharacter:
    """One character of a run; writes change the whole run."""

    def __init__(self, run: Run, index: int, region: DocxTextRegion) -> None:
        self._run = run
        self._index = index
        self._region = region

    @property
    def contents(self) -> str:
        glyph = self._run.text[self._index]
        # w:br and w:cr read as "\n"; they are line breaks inside the paragraph, not paragraph breaks.
        return " " if glyph == "\n" else glyph

    @property
    def font(self) -> TextFont:
        family = self._run.font.name or self._region.default_family
        style = font_style_name(bool(self._run.bold), bool(self._run.italic))
        return TextFont(name=f"{family} {style}", family=family, style=style)

    @font.setter
    def font(self, value: TextFont) -> None:
        self._run.font.name = value.family
        self._run.bold = value.is_bold
        self._run.italic = value.is_italic

    @property
    def size(self) -> Optional[float]:
        size = self._run.font.size
        return size.pt if size is not None else self._region.default_size

    @size.setter
    def size(self, value: Optional[float]) -> None:
        self._run.font.size = Pt(value) if value is not None else None

    @property
    def underline(self) -> bool:
        value = self._run.underline
        return bool(value) and value is not WD_UNDERLINE.NONE

    @underline.setter
    def underline(self, value: bool) -> None:
        self._run.underline = bool(value)

    @property
    def fill_color(self) -> Optional[Color]:
        color = self._run.font.color
        if color.type != MSO_COLOR_TYPE.RGB or color.rgb is None:
            return None
        rgb = color.rgb
        return RGBColor(rgb[0], rgb[1], rgb[2])

    @fill_color.setter
    def fill_color(self, value: Optional[Color]) -> None:
        self._run.font.color.rgb = _to_docx_rgb(value) if value is not None else None

    @property
    def opacity(self) -> float:
        return 100.0

    @opacity.setter
    def opacity(self, value: float) -> None:
        if abs(value - 100.0) > 1e-9:
            raise UnsupportedAttributeError("DOCX runs have no opacity")


class DocxTextParagraph:
    def __init__(self, paragraph: DocxParagraph, region: DocxTextRegion) -> None:
        self._paragraph = paragraph
        self._region = region

    def characters(self) -> list[DocxCharacter]:
        runs = (Run(r, self._paragraph) for r in iter_paragraph_runs(self._paragraph._p))
        return [DocxCharacter(run, index, self._region) for run in runs for index in range(len(run.text))]

    @property
    def justification(self) -> Optional[Justification]:
        alignment = self._paragraph.alignment
        return _ALIGN_TO_JUSTIFICATION.get(alignment) if alignment is not None else None

    @justification.setter
    def justification(self, value: Justification) -> None:
        alignment = _JUSTIFICATION_TO_ALIGN.get(value)
        if alignment is None:
            raise UnsupportedAttributeError(f"No DOCX alignment for {value.value}")
        self._paragraph.alignment = alignment

    @property
    def tab_stops(self) -> list[TabStop]:
        return [
            TabStop(ts.position.pt, _TAB_ALIGNMENTS[ts.alignment])
            for ts in self._paragraph.paragraph_format.tab_stops
            if ts.alignment in _TAB_ALIGNMENTS
        ]

    @tab_stops.setter
    def tab_stops(self, stops: list[TabStop]) -> None:
        tab_stops = self._paragraph.paragraph_format.tab_stops
        tab_stops.clear_all()
        for stop in stops:
            tab_stops.add_tab_stop(Pt(stop.position), WD_TAB_ALIGNMENT.LEFT)


class DocxTextRegion:
    def __init__(
        self,
        content: Any,
        parent: Any,
        *,
        layer: str = "body",
        default_family: str = _FALLBACK_FAMILY,
        default_size: Optional[float] = None,
    ) -> None:
        self._content = content
        self._parent = parent
        self.layer = layer
        self.default_family = default_family
        self.default_size = default_size

        container = _drawing_container(content)
        doc_pr = container.find(qn("wp:docPr")) if container is not None else None
        self.name = (doc_pr.get("name") if doc_pr is not None else None) or ""
        extent = container.find(qn("wp:extent")) if container is not None else None
        self.bounds = (
            Bounds(0.0, 0.0, int(extent.get("cx")) / _EMU_PER_PT, int(extent.get("cy")) / _EMU_PER_PT)
            if extent is not None
            else None
        )

        # Baseline formatting for text assigned later: first paragraph's pPr, first run's rPr.
        first_p = content.find(qn("w:p"))
        ppr = first_p.find(qn("w:pPr")) if first_p is not None else None
        first_r = next(content.iter(qn("w:r")), None)
        rpr = first_r.find(qn("w:rPr")) if first_r is not None else None
        self._ppr_template = deepcopy(ppr) if ppr is not None else None
        self._rpr_template = deepcopy(rpr) if rpr is not None else None
        try:
            self._anchor_template: str | None = self._body_pr().get("anchor")
        except UnsupportedAttributeError:
            self._anchor_template = None

    def _body_pr(self) -> Any:
        shape = self._content.getparent()
        shape = shape.getparent() if shape is not None else None
        body_pr = shape.find(_BODY_PR) if shape is not None else None
        if body_pr is None:
            raise UnsupportedAttributeError("Text box has no DrawingML body properties")
        return body_pr

    @property
    def vertical_alignment(self) -> VerticalAlignment:
        return _ANCHOR_TO_VALIGN.get(self._body_pr().get("anchor", "t"), VerticalAlignment.TOP)

    @vertical_alignment.setter
    def vertical_alignment(self, value: VerticalAlignment) -> None:
        self._body_pr().set("anchor", _VALIGN_TO_ANCHOR[value])

    def paragraphs(self) -> list[DocxTextParagraph]:
        return [DocxTextParagraph(DocxParagraph(p, self._parent), self) for p in self._content.findall(qn("w:p"))]

    def characters(self) -> list[Any]:
        stream: list[Any] = []
        paragraphs = self.paragraphs()
        for index, paragraph in enumerate(paragraphs):
            stream.extend(paragraph.characters())
            if index < len(paragraphs) - 1:
                stream.append(_ParagraphMark(TextFont(self.default_family, self.default_family)))
        return stream

    @property
    def contents(self) -> str:
        return "\n".join("".join(ch.contents for ch in p.characters()) for p in self.paragraphs())

    def set_contents(self, text: str) -> None:
        try:
            body_pr = self._body_pr()
        except UnsupportedAttributeError:
            body_pr = None
        if body_pr is not None:
            if self._anchor_template is None:
                body_pr.attrib.pop("anchor", None)
            else:
                body_pr.set("anchor", self._anchor_template)
        for p in self._content.findall(qn("w:p")):
            self._content.remove(p)
        for line in text.split("\n"):
            p = OxmlElement("w:p")
            if self._ppr_template is not None:
                p.append(deepcopy(self._ppr_template))
            self._content.append(p)
            paragraph = DocxParagraph(p, self._parent)
            for glyph in line:
                run = paragraph.add_run(glyph)
                if self._rpr_template is not None:
                    run._r.insert(0, deepcopy(self._rpr_template))

    def compact(self) -> int:
        """Merge neighbouring text-only runs that share identical run properties."""
        merged = 0
        for p in self._content.findall(qn("w:p")):
            previous = None
            for r in p.findall(qn("w:r")):
                if not _is_text_only_run(r):
                    previous = None
                    continue
                if previous is not None and r.getprevious() is previous and _rpr_key(previous) == _rpr_key(r):
                    prev_t = previous.find(qn("w:t"))
                    prev_t.text = (prev_t.text or "") + (r.find(qn("w:t")).text or "")
                    prev_t.set(qn("xml:space"), "preserve")
                    p.remove(r)
                    merged += 1
                    continue
                previous = r
        return merged


def _is_text_only_run(r: Any) -> bool:
    names = [_local(child.tag) for child in r.iterchildren()]
    return names.count("t") == 1 and all(name in ("rPr", "t") for name in names)


def _rpr_key(r: Any) -> str:
    rpr = r.find(qn("w:rPr"))
    return rpr.xml if rpr is not None else ""


class DocxHostDocument:
    def __init__(self, path: Path, document: Any) -> None:
        self.path = Path(path)
        self.name = self.path.name
        self.application_version = f"python-docx {getattr(docx, '__version__', '')}".strip()
        self._document = document

        default_family, default_size = _FALLBACK_FAMILY, None
        try:
            normal = document.styles["Normal"].font
            default_family = normal.name or _FALLBACK_FAMILY
            default_size = normal.size.pt if normal.size is not None else None
        except KeyError:
            _logger.debug(f"{self.name}: no 'Normal' style, using {_FALLBACK_FAMILY}")

        self._regions = [
            DocxTextRegion(content, document, default_family=default_family, default_size=default_size)
            for content in iter_textbox_contents(document.element.body)
        ]

    def text_regions(self) -> list[DocxTextRegion]:
        return list(self._regions)

    def find_font(self, name: str) -> TextFont:
        return parse_font_name(name)

    def find_spot(self, name: str) -> Spot:
        raise SpotNotFoundError(f"DOCX documents have no spot colour '{name}'")

    def close(self, save: bool = False) -> None:
        if not save:
            return
        merged = sum(region.compact() for region in self._regions)
        self._document.save(str(self.path))
        _logger.debug(f"Saved {self.path} ({merged} runs merged)")


class DocxOpener:
    def open(self, path: Path) -> DocxHostDocument:
        return DocxHostDocument(Path(path), Document(str(path)))
