from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from types import SimpleNamespace

from invoicepdf.render.run import render_many


def test_render_many_reads_specs_off_the_event_loop(monkeypatch, widget_invoice, style) -> None:
    loop_thread = threading.get_ident()
    readers = []

    def fake_from_file(path: Path):  # noqa: ARG001 - test helper
        readers.append(threading.get_ident())
        return widget_invoice

    monkeypatch.setattr("invoicepdf.render.run.DocumentSpec", SimpleNamespace(from_file=fake_from_file))
    outcomes = asyncio.run(render_many([Path("a.json"), Path("b.json"), Path("c.json")], style))

    assert len(outcomes) == 3
    assert all(isinstance(pdf, bytes) and pdf.startswith(b"%PDF") for pdf in outcomes)
    assert len(readers) == 3
    assert loop_thread not in readers


def test_render_many_keeps_failures_in_place(style, samples_dir, tmp_path) -> None:
    missing = tmp_path / "missing.json"
    outcomes = asyncio.run(render_many([samples_dir / "receipt.json", missing], style))

    assert outcomes[0].startswith(b"%PDF")
    assert isinstance(outcomes[1], FileNotFoundError)
