from __future__ import annotations

import json
from pathlib import Path

from .models import BatchReport


def report_records(report: BatchReport) -> list[dict]:
    records: list[dict] = []
    for doc in report.documents:
        for ordinal, issue in doc.all_issues():
            records.append(
                {
                    "operation": report.operation,
                    "document": doc.document,
                    "status": doc.status.value,
                    "item": ordinal,
                    "code": issue.code,
                    "severity": issue.severity.value,
                    "message": issue.message,
                    "details": issue.details,
                }
            )
    return records


def write_report_jsonl(report: BatchReport, path: Path) -> None:
    """One JSON line per issue, document-level issues first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for rec in report_records(report):
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
