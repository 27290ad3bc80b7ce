from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class Justification(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    FULL_JUSTIFY = "full_justify"
    FULL_JUSTIFY_LAST_LINE_LEFT = "full_justify_last_line_left"
    FULL_JUSTIFY_LAST_LINE_RIGHT = "full_justify_last_line_right"
    FULL_JUSTIFY_LAST_LINE_CENTER = "full_justify_last_line_center"


class VerticalAlignment(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"
    JUSTIFY = "justify"


class TabAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class TextFont:
    """A resolved font face.

    `name` is the lookup key understood by the host's font catalog (e.g. 'Arial-Bold'),
    `style` is the face name used for bold/italic detection (e.g. 'Bold Italic').
    """

    name: str
    family: str = ""
    style: str = "Regular"

    @property
    def is_bold(self) -> bool:
        return "Bold" in self.style or "Black" in self.style

    @property
    def is_italic(self) -> bool:
        return "Italic" in self.style or "Oblique" in self.style


@dataclass(frozen=True)
class Spot:
    """Named, document-scoped colour separation."""

    name: str


@dataclass(frozen=True)
class RGBColor:
    red: float
    green: float
    blue: float


@dataclass(frozen=True)
class CMYKColor:
    cyan: float
    magenta: float
    yellow: float
    black: float


@dataclass(frozen=True)
class GrayColor:
    gray: float


@dataclass(frozen=True)
class SpotColor:
    spot: Spot
    tint: Optional[float] = None


Color = Union[RGBColor, CMYKColor, GrayColor, SpotColor]


@dataclass(frozen=True)
class TabStop:
    position: float
    alignment: TabAlignment = TabAlignment.LEFT


@dataclass(frozen=True)
class Bounds:
    """Region bounds in points, y axis pointing down."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class RegionLayout:
    width: float
    height: float
    estimated_max_chars: int | None = None
    tab_stops: tuple[float, ...] = ()


class TagKind(str, Enum):
    BOLD = "b"
    ITALIC = "i"
    UNDERLINE = "u"
    SIZE = "size"
    RGB_COLOR = "color"
    CMYK_COLOR = "cmykcolor"
    GRAY_COLOR = "graycolor"
    SPOT_COLOR = "spotcolor"
    OPACITY = "opacity"
    FONT = "font"
    UNKNOWN = "?"


# Kinds written as a bare flag ("b") rather than "prefix:value".
FLAG_KINDS = frozenset({TagKind.BOLD, TagKind.ITALIC, TagKind.UNDERLINE})


@dataclass(frozen=True)
class StyleTag:
    """One independently parsed entry of a style descriptor."""

    kind: TagKind
    value: str = ""

    def __str__(self) -> str:
        if self.kind in FLAG_KINDS:
            return self.kind.value
        if self.kind is TagKind.UNKNOWN:
            return self.value
        return f"{self.kind.value}:{self.value}"


@dataclass(frozen=True)
class FrameInfo:
    name: str
    layer: str
    layout: RegionLayout | None = None


@dataclass(frozen=True)
class InterchangeMetadata:
    application_version: str
    export_date: str
    document_name: str
    translation_guide: str


@dataclass(frozen=True)
class InterchangeItem:
    """One <ITEM> record. On import `text` is None when the fragment has no TEXT block."""

    ordinal: int
    text: str | None
    line_styles: str | None = None
    para_style: str | None = None
    frame: FrameInfo | None = None

    @property
    def is_legacy(self) -> bool:
        return self.line_styles is None


@dataclass
class Issue:
    code: str
    severity: Severity
    message: str
    details: dict[str, Any] = field(default_factory=dict)


class ItemOutcome(str, Enum):
    STYLED = "styled"
    PLAIN = "plain"
    FALLBACK = "fallback"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ItemResult:
    ordinal: int
    outcome: ItemOutcome
    issues: list[Issue] = field(default_factory=list)

    @property
    def imported(self) -> bool:
        return self.outcome in (ItemOutcome.STYLED, ItemOutcome.PLAIN, ItemOutcome.FALLBACK)


class DocumentStatus(str, Enum):
    EXPORTED = "exported"
    IMPORTED = "imported"
    DECLINED = "declined"
    NO_REGIONS = "no_regions"
    MISSING_INTERCHANGE = "missing_interchange"
    FAILED = "failed"


@dataclass
class DocumentReport:
    """Outcome of exporting or importing one document."""

    document: str
    status: DocumentStatus
    interchange_path: Path | None = None
    available_regions: int = 0
    items: list[ItemResult] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)

    @property
    def imported_items(self) -> int:
        return sum(1 for item in self.items if item.imported)

    def all_issues(self) -> list[tuple[int | None, Issue]]:
        out: list[tuple[int | None, Issue]] = [(None, issue) for issue in self.issues]
        for item in self.items:
            out.extend((item.ordinal, issue) for issue in item.issues)
        return out


@dataclass
class BatchReport:
    operation: str  # 'export' | 'import'
    folder: Path
    documents: list[DocumentReport] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.documents)

    @property
    def processed(self) -> int:
        done = DocumentStatus.EXPORTED if self.operation == "export" else DocumentStatus.IMPORTED
        return sum(1 for doc in self.documents if doc.status is done)
