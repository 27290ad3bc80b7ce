from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_TRANSLATION_GUIDE = (
    "Preserve [TAB] and [NEWLINE] placeholders in translated text. "
    "Check FRAME_INFO for layout constraints and character limits."
)


@dataclass(frozen=True)
class ExportConfig:
    overwrite: str = "ask"  # 'ask' | 'always' | 'never'
    # Average Latin glyph width as a fraction of the point size.
    char_width_factor: float = 0.6
    translation_guide: str = DEFAULT_TRANSLATION_GUIDE


@dataclass(frozen=True)
class ImportConfig:
    save_changes: bool = True


@dataclass(frozen=True)
class AppConfig:
    file_suffix: str = ".docx"
    interchange_suffix: str = ".xml"
    log_path: str | None = None
    report_path: str | None = None
    export: ExportConfig = field(default_factory=ExportConfig)
    importing: ImportConfig = field(default_factory=ImportConfig)


def _resolve_optional_path(base_dir: Path, value: Any) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None
    path = Path(raw)
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


def _normalize_choice(value: Any, *, field_name: str, allowed: set[str], default: str) -> str:
    raw = str(default if value is None else value).strip().lower()
    if raw not in allowed:
        allowed_list = ", ".join(sorted(allowed))
        raise ValueError(f"Invalid value for {field_name}: {raw!r}. Allowed: {allowed_list}")
    return raw


def _normalize_suffix(value: Any, *, field_name: str, default: str) -> str:
    raw = str(default if value is None else value).strip()
    if not raw:
        raise ValueError(f"{field_name} must not be empty")
    return raw if raw.startswith(".") else "." + raw


def load_config(path: str | Path) -> AppConfig:
    cfg_path = Path(path)
    data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}

    export_data = data.get("export", {}) or {}
    import_data = data.get("import", {}) or {}

    char_width_factor = float(export_data.get("char_width_factor", 0.6))
    if char_width_factor <= 0:
        raise ValueError(f"export.char_width_factor must be > 0, got {char_width_factor}")

    export = ExportConfig(
        overwrite=_normalize_choice(
            export_data.get("overwrite", "ask"),
            field_name="export.overwrite",
            allowed={"ask", "always", "never"},
            default="ask",
        ),
        char_width_factor=char_width_factor,
        translation_guide=str(export_data.get("translation_guide") or DEFAULT_TRANSLATION_GUIDE).strip(),
    )
    importing = ImportConfig(save_changes=bool(import_data.get("save_changes", True)))

    return AppConfig(
        file_suffix=_normalize_suffix(data.get("file_suffix"), field_name="file_suffix", default=".docx"),
        interchange_suffix=_normalize_suffix(
            data.get("interchange_suffix"), field_name="interchange_suffix", default=".xml"
        ),
        log_path=_resolve_optional_path(cfg_path.parent, data.get("log_path")),
        report_path=_resolve_optional_path(cfg_path.parent, data.get("report_path")),
        export=export,
        importing=importing,
    )
