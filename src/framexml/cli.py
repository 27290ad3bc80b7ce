from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.prompt import Confirm

from .batch import export_folder, import_folder
from .config import AppConfig, load_config
from .docx_host import DocxOpener
from .logging_utils import setup_logging
from .models import BatchReport
from .report import write_report_jsonl


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="framexml",
        description="Export text boxes to translator-friendly XML and import translations back.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    e = sub.add_parser("export", help="Write <document>.xml next to every document in a folder.")
    i = sub.add_parser("import", help="Apply <document>.xml back onto every document in a folder.")
    for cmd in (e, i):
        cmd.add_argument("--folder", "-f", required=True, help="Folder containing the documents")
        cmd.add_argument("--config", "-c", default=None, help="Path to YAML config")
        cmd.add_argument("--suffix", default=None, help="Document file suffix (default .docx)")
        cmd.add_argument("--log", default=None, help="Override log path.")
        cmd.add_argument("--report", default=None, help="Write issues as JSONL to this path.")
        cmd.add_argument("--no-progress", action="store_true", help="Hide the progress bar.")
        cmd.add_argument("--verbose", "-v", action="store_true", help="Show DEBUG messages on the console.")

    overwrite = e.add_mutually_exclusive_group()
    overwrite.add_argument("--yes", "-y", action="store_true", help="Overwrite existing XML without asking.")
    overwrite.add_argument("--no-overwrite", action="store_true", help="Never overwrite existing XML.")

    i.add_argument("--no-save", action="store_true", help="Close documents without saving changes.")
    return p


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.suffix is not None:
        suffix = args.suffix if args.suffix.startswith(".") else "." + args.suffix
        cfg = cfg.__class__(**{**cfg.__dict__, "file_suffix": suffix})
    if args.log is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "log_path": str(args.log)})
    if args.report is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "report_path": str(args.report)})
    if args.cmd == "export" and (args.yes or args.no_overwrite):
        export_cfg = cfg.export.__class__(
            **{**cfg.export.__dict__, "overwrite": "always" if args.yes else "never"}
        )
        cfg = cfg.__class__(**{**cfg.__dict__, "export": export_cfg})
    if args.cmd == "import" and args.no_save:
        import_cfg = cfg.importing.__class__(**{**cfg.importing.__dict__, "save_changes": False})
        cfg = cfg.__class__(**{**cfg.__dict__, "importing": import_cfg})
    return cfg


def _confirm(message: str) -> bool:
    return Confirm.ask(message, default=False)


def _print_summary(report: BatchReport) -> None:
    for doc in report.documents:
        line = f"  {doc.document}: {doc.status.value}"
        if report.operation == "import" and doc.items:
            line += f" ({doc.imported_items}/{doc.available_regions} regions)"
        print(line)
    verb = "exported" if report.operation == "export" else "updated"
    print(f"{report.operation.capitalize()} complete: {report.processed} of {report.total} files {verb}.")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = load_config(args.config) if args.config else AppConfig()
    cfg = _apply_overrides(cfg, args)
    logger = setup_logging(
        Path(cfg.log_path) if cfg.log_path else None,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    folder = Path(args.folder).expanduser()
    progress = not args.no_progress
    try:
        if args.cmd == "export":
            report = export_folder(folder, DocxOpener(), cfg, _confirm, progress=progress)
        else:
            report = import_folder(folder, DocxOpener(), cfg, progress=progress)
    except NotADirectoryError as e:
        print(str(e), file=sys.stderr)
        return 2

    if report.total == 0:
        print(f"No {cfg.file_suffix} files found in the selected folder.", file=sys.stderr)
        return 2

    _print_summary(report)
    if cfg.report_path:
        write_report_jsonl(report, Path(cfg.report_path))
        logger.info(f"Report written: {cfg.report_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
