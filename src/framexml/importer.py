from __future__ import annotations

import logging
from typing import Sequence

from .config import AppConfig
from .frame_styles import apply_frame_tags
from .host import HostDocument, StyleCatalog, TextRegion
from .interchange import interchange_path, parse_items, read_interchange
from .line_styles import apply_line_styles, parse_line_styles
from .markers import decode_lines, expand_markers
from .models import (
    DocumentReport,
    DocumentStatus,
    InterchangeItem,
    Issue,
    ItemOutcome,
    ItemResult,
    Severity,
)

_logger = logging.getLogger(__name__)


def _apply_styles(region: TextRegion, item: InterchangeItem, catalog: StyleCatalog) -> None:
    # Offsets address the live text, so contents must already be assigned.
    lines = decode_lines(item.text or "")
    descriptors = parse_line_styles(item.line_styles or "")
    apply_line_styles(region.characters(), lines, descriptors, catalog)
    apply_frame_tags(region, item.para_style)


def restore_item(region: TextRegion, item: InterchangeItem, catalog: StyleCatalog) -> ItemResult:
    """Assign the item's text to the region, then replay its styles.

    Outcomes: PLAIN for legacy items (no LINE_STYLES), STYLED on success, FALLBACK when
    styling failed and the plain text was re-assigned over the partial styling, FAILED
    when not even the plain text could be assigned.
    """
    plain = expand_markers(item.text or "")
    result = ItemResult(
        ordinal=item.ordinal,
        outcome=ItemOutcome.PLAIN if item.is_legacy else ItemOutcome.STYLED,
    )

    try:
        region.set_contents(plain)
    except Exception as e:
        _logger.error(f"Item {item.ordinal}: cannot assign text: {e}")
        result.outcome = ItemOutcome.FAILED
        result.issues.append(
            Issue(code="item_failed", severity=Severity.ERROR, message=f"Could not import text: {e}", details={})
        )
        return result

    if item.is_legacy:
        return result

    try:
        _apply_styles(region, item, catalog)
    except Exception as e:
        _logger.warning(f"Error processing item {item.ordinal}: {e}; restoring plain text only")
        result.issues.append(
            Issue(
                code="item_fallback",
                severity=Severity.WARN,
                message=f"Styles not applied, plain text imported: {e}",
                details={"error_type": type(e).__name__},
            )
        )
        try:
            region.set_contents(plain)
            result.outcome = ItemOutcome.FALLBACK
        except Exception as fallback_error:
            _logger.error(f"Item {item.ordinal}: could not import text at all: {fallback_error}")
            result.outcome = ItemOutcome.FAILED
            result.issues.append(
                Issue(
                    code="item_failed",
                    severity=Severity.ERROR,
                    message=f"Could not import text at all: {fallback_error}",
                    details={},
                )
            )
    return result


def import_items(
    regions: Sequence[TextRegion],
    items: Sequence[InterchangeItem],
    catalog: StyleCatalog,
) -> list[ItemResult]:
    """Apply item i to region i; items beyond the region count are ignored."""
    results: list[ItemResult] = []
    for index, item in enumerate(items):
        if index >= len(regions):
            _logger.info(f"{len(items) - index} surplus items ignored (document has {len(regions)} regions)")
            break
        if item.text is None:
            results.append(
                ItemResult(
                    ordinal=item.ordinal,
                    outcome=ItemOutcome.SKIPPED,
                    issues=[
                        Issue(
                            code="item_missing_text",
                            severity=Severity.WARN,
                            message="Item has no TEXT block; region left unchanged.",
                            details={},
                        )
                    ],
                )
            )
            continue
        results.append(restore_item(regions[index], item, catalog))
    return results


def import_document(document: HostDocument, cfg: AppConfig) -> DocumentReport:
    """Replace every text region of an open document from its interchange file."""
    path = interchange_path(document.path, cfg.interchange_suffix)
    regions = document.text_regions()
    report = DocumentReport(
        document=document.name,
        status=DocumentStatus.IMPORTED,
        interchange_path=path,
        available_regions=len(regions),
    )

    if not regions:
        report.status = DocumentStatus.NO_REGIONS
        report.issues.append(
            Issue(code="no_regions", severity=Severity.INFO, message="No items to import: document has no text regions.")
        )
        _logger.info(f"No text regions in {document.name}")
        return report

    if not path.exists():
        report.status = DocumentStatus.MISSING_INTERCHANGE
        report.issues.append(
            Issue(
                code="missing_interchange",
                severity=Severity.ERROR,
                message=f"Can't find a matching interchange file: {path}",
                details={"path": str(path)},
            )
        )
        _logger.error(f"Can't find a matching interchange file: {path}")
        return report

    items = parse_items(read_interchange(path))
    report.items = import_items(regions, items, document)
    _logger.info(
        f"Import completed for {document.name}. Successfully imported {report.imported_items} "
        f"text regions out of {len(regions)} available."
    )
    return report
