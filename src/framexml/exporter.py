from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Callable

from .config import AppConfig, ExportConfig
from .frame_styles import extract_frame_tags, round_to
from .host import HostDocument, HostError, TextRegion
from .interchange import interchange_path, write_interchange
from .line_styles import extract_line_styles, serialize_line_styles
from .markers import encode_paragraphs
from .models import (
    DocumentReport,
    DocumentStatus,
    FrameInfo,
    InterchangeItem,
    InterchangeMetadata,
    Issue,
    RegionLayout,
    Severity,
)

_logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def _first_paragraph_tab_stops(region: TextRegion) -> tuple[float, ...]:
    try:
        paragraphs = region.paragraphs()
        if not paragraphs:
            return ()
        return tuple(round_to(ts.position) for ts in paragraphs[0].tab_stops)
    except HostError as e:
        _logger.debug(f"Tab stops unavailable: {e}")
        return ()


def compute_layout(region: TextRegion, char_width_factor: float = 0.6) -> RegionLayout | None:
    """Width/height, estimated Latin character capacity and first-paragraph tab stops.

    Returns None when the host cannot provide geometry; only the layout block is lost then.
    """
    try:
        bounds = region.bounds
        if bounds is None:
            return None
        width = round_to(bounds.width)
        height = round_to(bounds.height)

        estimated: int | None = None
        characters = region.characters()
        lead_size = characters[0].size if characters else None
        if lead_size:
            estimated = math.floor(width / (lead_size * char_width_factor))
    except (HostError, ArithmeticError) as e:
        _logger.debug(f"Layout unavailable for region '{region.name}': {e}")
        return None
    return RegionLayout(
        width=width,
        height=height,
        estimated_max_chars=estimated,
        tab_stops=_first_paragraph_tab_stops(region),
    )


def build_item(region: TextRegion, ordinal: int, cfg: ExportConfig | None = None) -> InterchangeItem:
    cfg = cfg or ExportConfig()
    paragraphs = region.paragraphs()
    text = encode_paragraphs([ch.contents for ch in p.characters()] for p in paragraphs)
    line_styles = serialize_line_styles(extract_line_styles(paragraphs))
    para_style = ";".join(extract_frame_tags(region))
    frame = FrameInfo(
        name=region.name or f"TextFrame_{ordinal}",
        layer=region.layer or "",
        layout=compute_layout(region, cfg.char_width_factor),
    )
    return InterchangeItem(
        ordinal=ordinal,
        text=text,
        line_styles=line_styles,
        para_style=para_style or None,
        frame=frame,
    )


def format_export_date(now: datetime | None = None) -> str:
    stamp = now or datetime.now().astimezone()
    return stamp.strftime("%a %b %d %Y %H:%M:%S GMT%z").strip()


def _overwrite_allowed(document_name: str, cfg: ExportConfig, confirm: Confirm) -> bool:
    if cfg.overwrite == "always":
        return True
    if cfg.overwrite == "never":
        return False
    return bool(confirm(f'Overwrite existing XML for "{document_name}"?'))


def export_document(
    document: HostDocument,
    cfg: AppConfig,
    confirm: Confirm,
    *,
    now: datetime | None = None,
) -> DocumentReport:
    """Write one interchange file next to the document.

    An existing file is only replaced after the overwrite policy (or the user) agrees.
    Documents without text regions are skipped, not failed.
    """
    path = interchange_path(document.path, cfg.interchange_suffix)
    report = DocumentReport(document=document.name, status=DocumentStatus.EXPORTED, interchange_path=path)

    if path.exists() and not _overwrite_allowed(document.name, cfg.export, confirm):
        report.status = DocumentStatus.DECLINED
        report.issues.append(
            Issue(
                code="overwrite_declined",
                severity=Severity.INFO,
                message=f"Existing interchange file kept, document not exported: {path.name}",
                details={"path": str(path)},
            )
        )
        _logger.info(f"Export declined for {document.name}: {path} already exists")
        return report

    regions = document.text_regions()
    report.available_regions = len(regions)
    if not regions:
        report.status = DocumentStatus.NO_REGIONS
        report.issues.append(
            Issue(
                code="no_regions",
                severity=Severity.INFO,
                message="Nothing to export: document has no text regions.",
                details={},
            )
        )
        _logger.info(f"Nothing to export in {document.name}")
        return report

    items = [build_item(region, ordinal, cfg.export) for ordinal, region in enumerate(regions, start=1)]
    metadata = InterchangeMetadata(
        application_version=document.application_version,
        export_date=format_export_date(now),
        document_name=document.name,
        translation_guide=cfg.export.translation_guide,
    )
    write_interchange(path, metadata, items)
    _logger.info(f"Exported {len(items)} text regions: {path}")
    return report
