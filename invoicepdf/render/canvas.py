from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .. import config
from ..models import Align, StyleConfig

# ascent + descent + line gap of the standard Type1 faces, relative to the font size
LINE_HEIGHT_FACTOR = 1.15


@dataclass(frozen=True)
class Margins:
    top: float
    left: float
    right: float
    bottom: float

    @classmethod
    def uniform(cls, margin: float) -> "Margins":
        return cls(top=margin, left=margin, right=margin, bottom=margin)


@dataclass(frozen=True)
class TextMetrics:
    end_y: float
    lines: int


class Canvas(Protocol):
    """
    Drawing surface used by the layout engine.

    Coordinates are measured from the top-left corner of the page, y growing
    downwards. ``draw_text`` wraps to ``width`` and reports where the text ended.
    """

    width: float
    height: float
    margins: Margins

    def register_font(self, name: str, path: Path) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None: ...

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float, color: str, line_width: float = 1.0) -> None: ...

    def set_font(self, name: str) -> None: ...

    def set_fill_color(self, color: str) -> None: ...

    def set_font_size(self, size: float) -> None: ...

    def line_height(self) -> float: ...

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        align: str = "left",
        letter_spacing: float = 0.0,
    ) -> TextMetrics: ...

    def finish(self) -> bytes: ...


def _color(value: str) -> colors.Color:
    # raises ValueError for anything reportlab cannot parse
    return colors.toColor(value)


class ReportLabCanvas:
    """Single-page canvas backed by reportlab, collecting the PDF in memory."""

    def __init__(self, page_size: Tuple[float, float] = A4, margin: float = config.DEFAULT_MARGIN) -> None:
        self._buffer = io.BytesIO()
        self._canv = canvas.Canvas(self._buffer, pagesize=page_size)
        self.width, self.height = page_size
        self.margins = Margins.uniform(margin)
        self._font_name = "Helvetica"
        self._font_size = 10.0
        self._finished = False

    @classmethod
    def for_style(cls, style: StyleConfig) -> "ReportLabCanvas":
        return cls(page_size=style.document.page_size, margin=style.document.margin)

    def _check_open(self) -> None:
        if self._finished:
            raise RuntimeError("Canvas already finished; no further drawing accepted")

    def _pdf_y(self, y: float) -> float:
        return self.height - y

    def register_font(self, name: str, path: Path) -> None:
        pdfmetrics.registerFont(TTFont(name, str(path)))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str) -> None:
        self._check_open()
        self._canv.saveState()
        self._canv.setFillColor(_color(color))
        self._canv.rect(x, self._pdf_y(y) - h, w, h, stroke=0, fill=1)
        self._canv.restoreState()

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float, color: str, line_width: float = 1.0) -> None:
        self._check_open()
        self._canv.saveState()
        self._canv.setStrokeColor(_color(color))
        self._canv.setLineWidth(line_width)
        self._canv.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))
        self._canv.restoreState()

    def set_font(self, name: str) -> None:
        self._check_open()
        pdfmetrics.getFont(name)
        self._font_name = name
        self._canv.setFont(self._font_name, self._font_size)

    def set_fill_color(self, color: str) -> None:
        self._check_open()
        self._canv.setFillColor(_color(color))

    def set_font_size(self, size: float) -> None:
        self._check_open()
        self._font_size = float(size)
        self._canv.setFont(self._font_name, self._font_size)

    def line_height(self) -> float:
        return self._font_size * LINE_HEIGHT_FACTOR

    def text_width(self, text: str, letter_spacing: float = 0.0) -> float:
        width = self._canv.stringWidth(text, self._font_name, self._font_size)
        if letter_spacing and len(text) > 1:
            width += letter_spacing * (len(text) - 1)
        return width

    def _wrap_words(self, text: str, max_width: float, letter_spacing: float) -> List[str]:
        words = (text or "").split()
        if not words:
            return [""]

        lines: List[str] = []
        cur: List[str] = []
        for w in words:
            test = " ".join(cur + [w])
            if self.text_width(test, letter_spacing) <= max_width:
                cur.append(w)
                continue
            if cur:
                lines.append(" ".join(cur))
                cur = [w]
            else:
                # a single word wider than the column is kept on its own line
                lines.append(w)
        if cur:
            lines.append(" ".join(cur))
        return lines

    def wrap(self, text: str, max_width: float, letter_spacing: float = 0.0) -> List[str]:
        lines: List[str] = []
        for paragraph in text.splitlines() or [""]:
            lines.extend(self._wrap_words(paragraph, max_width, letter_spacing))
        return lines

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        align: str = "left",
        letter_spacing: float = 0.0,
    ) -> TextMetrics:
        self._check_open()
        if width is None:
            width = max(0.0, self.width - self.margins.right - x)
        lines = self.wrap(str(text), width, letter_spacing)
        ascent = pdfmetrics.getAscent(self._font_name, self._font_size)
        leading = self.line_height()
        how = Align(align)

        for index, line in enumerate(lines):
            baseline = self._pdf_y(y + index * leading + ascent)
            if how == Align.RIGHT:
                self._canv.drawRightString(x + width, baseline, line, charSpace=letter_spacing)
            elif how == Align.CENTER:
                self._canv.drawCentredString(x + width / 2, baseline, line, charSpace=letter_spacing)
            else:
                self._canv.drawString(x, baseline, line, charSpace=letter_spacing)

        return TextMetrics(end_y=y + len(lines) * leading, lines=len(lines))

    def finish(self) -> bytes:
        self._check_open()
        self._canv.showPage()
        self._canv.save()
        self._finished = True
        return self._buffer.getvalue()
