from __future__ import annotations

import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

from invoicepdf.render.invoice import Invoice
from invoicepdf.render.preview import render_preview


class DummyPixmap:
    def save(self, path: str) -> None:
        Path(path).write_text("preview", encoding="utf-8")


class DummyPage:
    def __init__(self) -> None:
        self.rect = SimpleNamespace(width=595.0, height=842.0)
        self.matrix = None

    def get_pixmap(self, matrix=None, alpha=True) -> DummyPixmap:  # noqa: ARG002 - signature matches fitz
        self.matrix = matrix
        return DummyPixmap()


class DummyDoc:
    def __init__(self) -> None:
        self.closed = False
        self.loaded = []
        self.page = DummyPage()

    def __enter__(self) -> "DummyDoc":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001 - test helper
        self.closed = True

    def load_page(self, index: int) -> DummyPage:
        self.loaded.append(index)
        return self.page


def test_render_preview_closes_document(monkeypatch) -> None:
    doc = DummyDoc()

    def fake_open(path: str) -> DummyDoc:  # noqa: ARG001 - test helper
        return doc

    with tempfile.TemporaryDirectory() as temp_dir:
        monkeypatch.setattr("invoicepdf.render.preview.fitz.open", fake_open)
        out_path = render_preview(Path("document.pdf"), Path(temp_dir) / "nested" / "preview.png")
        assert doc.closed is True
        assert doc.loaded == [0]
        assert out_path.exists()
        # short side scaled to at least 1600px
        assert doc.page.matrix.a == pytest.approx(1600 / 595.0)


def test_render_preview_writes_png(widget_invoice) -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        pdf_path = Path(temp_dir) / "document.pdf"
        pdf_path.write_bytes(Invoice(widget_invoice).generate())

        out_path = render_preview(pdf_path, Path(temp_dir) / "preview.png", min_px=200)
        assert out_path.read_bytes().startswith(b"\x89PNG")
