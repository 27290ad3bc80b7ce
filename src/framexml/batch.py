from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from .config import AppConfig
from .exporter import Confirm, export_document
from .host import DocumentOpener, HostDocument
from .importer import import_document
from .models import BatchReport, DocumentReport, DocumentStatus, Issue, Severity

_logger = logging.getLogger(__name__)


def list_documents(folder: Path, suffix: str) -> list[Path]:
    """Files in `folder` (not recursive) whose name ends with `suffix`, case-insensitive."""
    if not folder.is_dir():
        raise NotADirectoryError(f"Folder not found: {folder}")
    wanted = suffix.lower()
    return sorted(p for p in folder.iterdir() if p.is_file() and p.name.lower().endswith(wanted))


def _failed(path: Path, code: str, error: Exception) -> DocumentReport:
    return DocumentReport(
        document=path.name,
        status=DocumentStatus.FAILED,
        issues=[
            Issue(
                code=code,
                severity=Severity.ERROR,
                message=f"{type(error).__name__}: {error}",
                details={"path": str(path)},
            )
        ],
    )


def _run_batch(
    operation: str,
    folder: Path,
    opener: DocumentOpener,
    cfg: AppConfig,
    process: Callable[[HostDocument], DocumentReport],
    *,
    save: bool,
    progress: bool,
) -> BatchReport:
    report = BatchReport(operation=operation, folder=folder)
    paths = list_documents(folder, cfg.file_suffix)
    _logger.info(f"{operation.capitalize()}: {len(paths)} '{cfg.file_suffix}' files in {folder}")

    for path in tqdm(paths, desc=operation.capitalize(), unit="doc", disable=not progress):
        try:
            document = opener.open(path)
        except Exception as e:
            _logger.error(f"Cannot open {path}: {e}")
            report.documents.append(_failed(path, "open_failed", e))
            continue
        _logger.debug(f"Opened {path}")

        try:
            doc_report = process(document)
        except Exception as e:
            _logger.error(f"Fatal error in {operation} of {path.name}: {e}")
            doc_report = _failed(path, "document_fatal", e)
        report.documents.append(doc_report)

        try:
            document.close(save=save)
        except Exception as e:
            _logger.error(f"Cannot close {path.name}: {e}")
            doc_report.issues.append(
                Issue(code="close_failed", severity=Severity.ERROR, message=str(e), details={"save": save})
            )
    return report


def export_folder(
    folder: Path,
    opener: DocumentOpener,
    cfg: AppConfig,
    confirm: Confirm,
    *,
    progress: bool = True,
) -> BatchReport:
    """Export every matching document; documents are always closed without saving."""
    report = _run_batch(
        "export",
        folder,
        opener,
        cfg,
        lambda document: export_document(document, cfg, confirm),
        save=False,
        progress=progress,
    )
    _logger.info(f"Export complete: {report.processed} of {report.total} files exported.")
    return report


def import_folder(
    folder: Path,
    opener: DocumentOpener,
    cfg: AppConfig,
    *,
    progress: bool = True,
) -> BatchReport:
    """Import every matching document from its interchange file, saving per configuration."""
    report = _run_batch(
        "import",
        folder,
        opener,
        cfg,
        lambda document: import_document(document, cfg),
        save=cfg.importing.save_changes,
        progress=progress,
    )
    _logger.info(f"Import complete: {report.processed} of {report.total} files updated.")
    return report
