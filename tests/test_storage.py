from __future__ import annotations

from pathlib import Path

import pytest

from invoicepdf.storage import artifact_path, slug_from_name, write_error, write_pdf


def test_slug_is_path_safe() -> None:
    slug = slug_from_name("../Receipt #42 / March")
    assert slug == "receipt-42-march"
    assert "/" not in slug and ".." not in slug


def test_slug_for_unsluggable_name_is_stable() -> None:
    first = slug_from_name("###")
    assert first == slug_from_name("###")
    assert len(first) == 12


def test_write_pdf_replaces_atomically(tmp_path) -> None:
    path = write_pdf("receipt", b"%PDF-1", base_dir=tmp_path)
    write_pdf("receipt", b"%PDF-2", base_dir=tmp_path)

    assert path == tmp_path / "receipt" / "document.pdf"
    assert path.read_bytes() == b"%PDF-2"
    assert list(path.parent.iterdir()) == [path]


def test_write_pdf_refuses_empty_document(tmp_path) -> None:
    with pytest.raises(ValueError):
        write_pdf("receipt", b"", base_dir=tmp_path)
    assert not artifact_path("receipt", "pdf", base_dir=tmp_path).exists()


def test_write_error(tmp_path) -> None:
    path = write_error("payout", "InvalidRowError: bad row", base_dir=tmp_path)
    assert path.name == "error.log"
    assert path.read_text(encoding="utf-8") == "InvalidRowError: bad row"


def test_failed_write_leaves_no_temp_file(tmp_path, monkeypatch) -> None:
    def broken_replace(self, target):  # noqa: ARG001 - test helper
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", broken_replace)
    with pytest.raises(OSError):
        write_pdf("receipt", b"%PDF-1", base_dir=tmp_path)

    assert list((tmp_path / "receipt").iterdir()) == []
