from __future__ import annotations

import pytest

from framexml.config import DEFAULT_TRANSLATION_GUIDE, AppConfig, load_config


def test_load_config_defaults_for_empty_file(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("", encoding="utf-8")

    cfg = load_config(cfg_path)

    assert cfg == AppConfig()
    assert cfg.export.overwrite == "ask"
    assert cfg.export.translation_guide == DEFAULT_TRANSLATION_GUIDE
    assert cfg.importing.save_changes is True


def test_load_config_reads_sections_and_resolves_paths(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "file_suffix: ai\n"
        "log_path: logs/run.log\n"
        "report_path: report.jsonl\n"
        "export:\n"
        "  overwrite: ALWAYS\n"
        "  char_width_factor: 0.5\n"
        "  translation_guide: Keep tags.\n"
        "import:\n"
        "  save_changes: false\n",
        encoding="utf-8",
    )

    cfg = load_config(cfg_path)

    assert cfg.file_suffix == ".ai"
    assert cfg.interchange_suffix == ".xml"
    assert cfg.log_path == str((tmp_path / "logs" / "run.log").resolve())
    assert cfg.report_path == str((tmp_path / "report.jsonl").resolve())
    assert cfg.export.overwrite == "always"
    assert cfg.export.char_width_factor == 0.5
    assert cfg.export.translation_guide == "Keep tags."
    assert cfg.importing.save_changes is False


@pytest.mark.parametrize(
    "body",
    [
        "export:\n  overwrite: sometimes\n",
        "export:\n  char_width_factor: 0\n",
        "file_suffix: ''\n",
    ],
)
def test_load_config_rejects_invalid_values(tmp_path, body):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(body, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)
