from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from pydantic import TypeAdapter

from .. import config
from ..models import (
    Align,
    ColorCode,
    DocumentSpec,
    FontSize,
    FontWeight,
    LabeledValue,
    LegalLine,
    Row,
    StyleConfig,
    TotalLine,
)
from .canvas import Canvas, ReportLabCanvas
from .layout import LayoutEngine, RowKind
from .pricing import pretty_price

logger = logging.getLogger(__name__)

_ROWS = TypeAdapter(List[Row])
_TOTALS = TypeAdapter(List[TotalLine])
_LEGAL = TypeAdapter(List[LegalLine])
_BLOCK = TypeAdapter(Optional[List[LabeledValue]])


class Invoice:
    """
    One document (invoice, receipt or payout statement) rendered onto one canvas.

    Instances are single-use: ``generate`` lays out the header, the two party
    blocks, the line-item table, the totals and the legal text, in that order,
    and returns the finished PDF bytes.
    """

    def __init__(
        self,
        document: DocumentSpec,
        style: StyleConfig | None = None,
        canvas: Canvas | None = None,
    ) -> None:
        self.document = document
        self.style = style or StyleConfig()
        self.canvas = canvas or ReportLabCanvas.for_style(self.style)
        self.engine = LayoutEngine(self.document, self.style, self.canvas)
        self.customer = document.customer
        self.seller = document.seller
        self._generated = False
        # top of the party blocks; pushed down when the header lines run past the band
        self._content_top = self._below_header()
        self._load_custom_fonts()

    def _load_custom_fonts(self) -> None:
        for font in (self.style.fonts.normal, self.style.fonts.bold):
            if font.path:
                logger.debug("Registering font %s from %s", font.name, font.path)
                self.canvas.register_font(font.name, font.path)

    def set_customer(self, customer: Iterable | None) -> "Invoice":
        self.customer = _BLOCK.validate_python(list(customer) if customer is not None else None)
        return self

    def set_seller(self, seller: Iterable | None) -> "Invoice":
        self.seller = _BLOCK.validate_python(list(seller) if seller is not None else None)
        return self

    # -------------------- Entry points --------------------
    def generate(
        self,
        line_items: Sequence | None = None,
        totals: Sequence | None = None,
        legal: Sequence | None = None,
    ) -> bytes:
        self._layout(line_items, totals, legal)
        return self.canvas.finish()

    async def agenerate(
        self,
        line_items: Sequence | None = None,
        totals: Sequence | None = None,
        legal: Sequence | None = None,
    ) -> bytes:
        self._layout(line_items, totals, legal)
        return await asyncio.to_thread(self.canvas.finish)

    def _layout(self, line_items: Sequence | None, totals: Sequence | None, legal: Sequence | None) -> None:
        if self._generated:
            raise RuntimeError("Invoice.generate() can only run once; create a new Invoice per document")
        self._generated = True

        rows = _ROWS.validate_python(line_items) if line_items is not None else self.document.line_items
        total_lines = _TOTALS.validate_python(totals) if totals is not None else self.document.totals
        legal_lines = _LEGAL.validate_python(legal) if legal is not None else self.document.legal

        self.engine.check_row(self.document.details_header, "details header")
        for index, row in enumerate(rows):
            self.engine.check_row(row, f"line item {index + 1}")

        logger.debug(
            "Rendering %r: %d line items, %d totals, %d legal lines",
            self.document.name,
            len(rows),
            len(total_lines),
            len(legal_lines),
        )
        self.generate_header()
        self.generate_details(self.customer, "customer")
        self.generate_details(self.seller, "seller")
        self.generate_line_items(rows)
        self.generate_totals(total_lines)
        self.generate_legal(legal_lines)

    # -------------------- Stages --------------------
    def _below_header(self) -> float:
        return self.style.header.height + config.SECTION_GAP

    def generate_header(self) -> None:
        engine = self.engine
        margins = self.canvas.margins
        header = self.style.header

        self.canvas.fill_rect(0, 0, self.canvas.width, header.height, header.background_color)

        engine.move_to(margins.left, margins.top)
        engine.set_text(self.document.name, size=FontSize.TITLE, weight=FontWeight.BOLD)

        engine.move_to(header.text_position, margins.top)
        for index, line in enumerate(self.document.header):
            engine.set_text(
                f"{line.label}:" if line.label else "",
                weight=FontWeight.BOLD,
                margin_top=config.HEADER_LINE_GAP if index > 0 else 0,
            )
            for value in line.values:
                engine.set_text(value, color_code=ColorCode.SECONDARY, margin_top=config.HEADER_LINE_GAP)

        self._content_top = max(self._below_header(), engine.cursor.y + config.SECTION_GAP)
        engine.move_to(margins.left, self._content_top)

    def generate_details(self, entity: Optional[List[LabeledValue]], block: str) -> None:
        engine = self.engine
        margins = self.canvas.margins

        if not entity:
            return

        x = margins.left if block == "customer" else self.style.header.text_position
        engine.move_to(x, self._content_top)

        for line in entity:
            engine.set_text(
                f"{line.label}:" if line.label.strip() else " ",
                weight=FontWeight.BOLD,
                margin_top=config.PARTY_LABEL_GAP,
                max_width=config.PARTY_MAX_WIDTH,
            )
            for value in line.values:
                engine.set_text(
                    value,
                    color_code=ColorCode.SECONDARY,
                    margin_top=config.PARTY_VALUE_GAP,
                    max_width=config.PARTY_MAX_WIDTH,
                )

        engine.heights.record(block, engine.cursor.y)
        # both blocks start at the same y; rest below whichever is taller
        engine.move_to(margins.left, engine.heights.table_top(fallback=self._content_top, gap=0))

    def generate_line_items(self, line_items: Sequence[Row]) -> None:
        engine = self.engine
        start_y = engine.heights.table_top(fallback=self._content_top, gap=config.SECTION_GAP)
        engine.move_to(self.canvas.margins.left, start_y)

        engine.table_row(RowKind.HEADER, self.document.details_header, engine.cursor.y)
        engine.separator()

        for row in line_items:
            engine.table_row(RowKind.ITEM, row, engine.cursor.y)
            engine.separator()

        engine.move_down(config.TABLE_TRAILING_LINES)

    def generate_totals(self, totals: Sequence[TotalLine]) -> None:
        engine = self.engine
        table = self.style.table

        for total in totals:
            row_top = engine.cursor.y + config.TOTALS_ROW_GAP

            engine.move_to(table.quantity.position, row_top)
            label_end = engine.set_text(total.label, weight=FontWeight.BOLD, max_width=table.quantity.max_width)

            value: object = total.value
            if total.is_price:
                value = pretty_price(total.value, self.document.currency)

            engine.move_to(table.total.position, row_top)
            value_end = engine.set_text(
                value,
                weight=FontWeight.BOLD,
                max_width=table.total.max_width,
                align=Align.RIGHT if total.is_price else Align.LEFT,
            )

            engine.move_to(y=max(label_end, value_end))
            engine.move_down()

    def generate_legal(self, legal: Sequence[LegalLine]) -> None:
        engine = self.engine
        engine.move_to(self.canvas.margins.left, engine.cursor.y + config.LEGAL_GAP)

        for line in legal:
            color_code, color = ColorCode.PRIMARY, None
            if line.color:
                try:
                    color_code = ColorCode(line.color)
                except ValueError:
                    color = line.color
            engine.set_text(
                line.value,
                weight=line.weight,
                color_code=color_code,
                color=color,
                align=Align.LEFT,
                margin_top=config.LEGAL_LINE_GAP,
            )
