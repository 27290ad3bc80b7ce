from __future__ import annotations

import pytest

from framexml.batch import export_folder, import_folder, list_documents
from framexml.config import AppConfig, ImportConfig
from framexml.memory_host import MemoryDocument, MemoryOpener, MemoryRegion
from framexml.models import DocumentStatus


def _touch(folder, *names):
    for name in names:
        (folder / name).write_bytes(b"")
    return [folder / name for name in names]


class _ExplodingDocument(MemoryDocument):
    def text_regions(self):
        raise RuntimeError("document model unavailable")


def test_list_documents_filters_suffix_case_insensitively(tmp_path):
    _touch(tmp_path, "b.AI", "a.ai", "notes.txt", "a.ai.xml")
    (tmp_path / "sub.ai").mkdir()
    assert [p.name for p in list_documents(tmp_path, ".ai")] == ["a.ai", "b.AI"]


def test_list_documents_missing_folder(tmp_path):
    with pytest.raises(NotADirectoryError):
        list_documents(tmp_path / "missing", ".ai")


def test_export_folder_isolates_fatal_document_errors(tmp_path):
    good, bad, empty = _touch(tmp_path, "a.ai", "b.ai", "c.ai")
    documents = [
        MemoryDocument(good, [MemoryRegion.from_text("Hello")]),
        _ExplodingDocument(bad),
        MemoryDocument(empty),
    ]
    opener = MemoryOpener(documents)

    report = export_folder(tmp_path, opener, AppConfig(file_suffix=".ai"), lambda _: True, progress=False)

    assert [doc.status for doc in report.documents] == [
        DocumentStatus.EXPORTED,
        DocumentStatus.FAILED,
        DocumentStatus.NO_REGIONS,
    ]
    assert report.documents[1].issues[0].code == "document_fatal"
    assert (report.total, report.processed) == (3, 1)
    assert (tmp_path / "a.ai.xml").exists()
    assert all(doc.closed and not doc.saved for doc in documents)


def test_unopenable_document_is_reported_and_batch_continues(tmp_path):
    _touch(tmp_path, "a.ai", "b.ai")
    opener = MemoryOpener([MemoryDocument(tmp_path / "b.ai", [MemoryRegion.from_text("x")])])

    report = export_folder(tmp_path, opener, AppConfig(file_suffix=".ai"), lambda _: True, progress=False)

    assert [doc.status for doc in report.documents] == [DocumentStatus.FAILED, DocumentStatus.EXPORTED]
    assert report.documents[0].issues[0].code == "open_failed"


def test_import_folder_saves_per_configuration(tmp_path):
    first, second = _touch(tmp_path, "a.ai", "b.ai")
    source = [MemoryDocument(first, [MemoryRegion.from_text("Eins")])]
    export_folder(tmp_path, MemoryOpener(source), AppConfig(file_suffix=".ai"), lambda _: True, progress=False)

    region = MemoryRegion.from_text("One")
    documents = [MemoryDocument(first, [region]), MemoryDocument(second, [MemoryRegion.from_text("Two")])]
    report = import_folder(tmp_path, MemoryOpener(documents), AppConfig(file_suffix=".ai"), progress=False)

    assert [doc.status for doc in report.documents] == [
        DocumentStatus.IMPORTED,
        DocumentStatus.MISSING_INTERCHANGE,
    ]
    assert region.contents == "Eins"
    assert all(doc.saved for doc in documents)

    dry = [MemoryDocument(first, [MemoryRegion.from_text("One")])]
    cfg = AppConfig(file_suffix=".ai", importing=ImportConfig(save_changes=False))
    import_folder(tmp_path, MemoryOpener(dry), cfg, progress=False)
    assert dry[0].closed and not dry[0].saved
