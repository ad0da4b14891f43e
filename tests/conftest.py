from __future__ import annotations

import math
from pathlib import Path
from typing import List, NamedTuple, Optional

import pytest
from reportlab.lib.pagesizes import A4

from invoicepdf.models import DocumentSpec, StyleConfig
from invoicepdf.render.canvas import Margins, TextMetrics

SAMPLES_DIR = Path(__file__).resolve().parents[1] / "assets" / "samples"


class TextDraw(NamedTuple):
    text: str
    x: float
    y: float
    width: float
    align: str
    letter_spacing: float
    end_y: float
    font: str
    color: Optional[str]
    size: float


class RecordingCanvas:
    """
    Deterministic canvas stub: fixed-width glyphs (half the font size), a line
    height of 1.2 x the font size, and every call recorded in order.
    """

    def __init__(self, page_size=A4, margin: float = 30.0) -> None:
        self.width, self.height = page_size
        self.margins = Margins.uniform(margin)
        self.calls: List[tuple] = []
        self.font = "Helvetica"
        self.color: Optional[str] = None
        self.size = 10.0
        self.finished = False

    def register_font(self, name: str, path: Path) -> None:
        self.calls.append(("register_font", name, str(path)))

    def fill_rect(self, x, y, w, h, color) -> None:
        self.calls.append(("fill_rect", x, y, w, h, color))

    def stroke_line(self, x1, y1, x2, y2, color, line_width=1.0) -> None:
        self.calls.append(("stroke_line", x1, y1, x2, y2, color, line_width))

    def set_font(self, name: str) -> None:
        self.font = name
        self.calls.append(("set_font", name))

    def set_fill_color(self, color: str) -> None:
        self.color = color
        self.calls.append(("set_fill_color", color))

    def set_font_size(self, size: float) -> None:
        self.size = float(size)
        self.calls.append(("set_font_size", self.size))

    def line_height(self) -> float:
        return self.size * 1.2

    def draw_text(self, text, x, y, width=None, align="left", letter_spacing=0.0) -> TextMetrics:
        if width is None:
            width = self.width - self.margins.right - x
        per_line = max(1, int(width // (self.size * 0.5)))
        lines = sum(max(1, math.ceil(len(p) / per_line)) for p in (text.splitlines() or [""]))
        end_y = y + lines * self.line_height()
        self.calls.append(
            ("draw_text", TextDraw(text, x, y, width, align, letter_spacing, end_y, self.font, self.color, self.size))
        )
        return TextMetrics(end_y=end_y, lines=lines)

    def finish(self) -> bytes:
        self.finished = True
        return b"%PDF-recorded"

    # helpers for assertions
    @property
    def texts(self) -> List[TextDraw]:
        return [call[1] for call in self.calls if call[0] == "draw_text"]

    def text(self, value: str) -> TextDraw:
        return next(draw for draw in self.texts if draw.text == value)

    def index_of(self, value: str) -> int:
        return next(i for i, call in enumerate(self.calls) if call[0] == "draw_text" and call[1].text == value)

    def ops(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def canvas_factory():
    return RecordingCanvas


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def style() -> StyleConfig:
    return StyleConfig()


@pytest.fixture
def widget_invoice() -> DocumentSpec:
    return DocumentSpec.model_validate(
        {
            "name": "Invoice",
            "header": [{"label": "Invoice Number", "value": 1}],
            "currency": "EUR",
            "detailsHeader": [{"value": "Description"}, {"value": "Quantity"}, {"value": "Amount"}],
            "lineItems": [[{"value": "Widget"}, {"value": 1}, {"value": 500, "isPrice": True}]],
            "totals": [{"label": "Total", "value": 500, "isPrice": True}],
        }
    )


@pytest.fixture
def samples_dir() -> Path:
    return SAMPLES_DIR
