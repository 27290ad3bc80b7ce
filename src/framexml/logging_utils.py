from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler


def setup_logging(log_path: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    """Console output at `level`; the optional log file also keeps DEBUG records.

    Skipped style tags and unreadable attributes are only logged at DEBUG, so the
    file is where a batch run's per-attribute failures end up.
    """
    console = RichHandler(rich_tracebacks=True, show_path=False, show_time=True, show_level=True)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]
    root_level = level
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        )
        handlers.append(fh)
        root_level = logging.DEBUG

    logging.basicConfig(level=root_level, handlers=handlers, format="%(message)s", force=True)
    # python-docx and lxml are chatty at DEBUG.
    logging.getLogger("docx").setLevel(logging.INFO)
    return logging.getLogger("framexml")
