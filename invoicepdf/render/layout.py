from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .. import config
from ..models import Align, Cell, ColorCode, DocumentSpec, FontSize, FontWeight, StyleConfig, SubItem
from .canvas import Canvas
from .pricing import pretty_price


class LayoutError(ValueError):
    """The document cannot be laid out; raised before anything is drawn."""


class InvalidRowError(LayoutError):
    pass


class UnsupportedTableError(LayoutError):
    pass


class RowKind(Enum):
    """Table row variants and the styling each one draws with."""

    HEADER = (FontWeight.BOLD, ColorCode.PRIMARY)
    ITEM = (FontWeight.NORMAL, ColorCode.PRIMARY)
    SUBITEM = (FontWeight.NORMAL, ColorCode.SECONDARY)

    def __init__(self, weight: FontWeight, color_code: ColorCode) -> None:
        self.weight = weight
        self.color_code = color_code


@dataclass
class Cursor:
    x: float = 0.0
    y: float = 0.0

    def snapshot(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class SectionHeights:
    """Where the customer and seller blocks ended; each is written at most once."""

    customer: Optional[float] = None
    seller: Optional[float] = None

    def record(self, block: str, y: float) -> None:
        if block not in ("customer", "seller"):
            raise ValueError(f"Unknown section: {block}")
        if getattr(self, block) is not None:
            raise RuntimeError(f"Section height for {block} already recorded")
        setattr(self, block, y)

    def table_top(self, fallback: float, gap: float) -> float:
        recorded = [h for h in (self.customer, self.seller) if h is not None]
        if not recorded:
            return fallback
        return max(recorded) + gap


def _text(value: object) -> str:
    return "" if value is None else str(value)


class LayoutEngine:
    """
    Turns document content into positioned draws on one canvas.

    The engine owns a single cursor. ``set_text`` draws at the cursor and moves it
    to where the canvas reports the text ended, so wrapped lines push the flow
    down. Table rows start every column at the same ``y`` and leave the cursor
    below the tallest column.
    """

    def __init__(self, document: DocumentSpec, style: StyleConfig, canvas: Canvas) -> None:
        self.document = document
        self.style = style
        self.canvas = canvas
        self.cursor = Cursor(canvas.margins.left, canvas.margins.top)
        self.heights = SectionHeights()

    # -------------------- Cursor --------------------
    def move_to(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        if x is not None:
            self.cursor.x = x
        if y is not None:
            self.cursor.y = y

    def move_down(self, lines: float = 1.0) -> None:
        self.cursor.y += lines * self.canvas.line_height()

    # -------------------- Text --------------------
    def resolve_font(self, weight: object) -> str:
        return self.style.fonts.for_weight(FontWeight.coerce(weight)).name

    def value_or_transliterate(self, value: object) -> object:
        fallback = self.style.fonts.fallback
        if fallback is None or not fallback.matches(value):
            return value
        # matched text is not transliterated; it is drawn as given
        return value

    def set_text(
        self,
        text: object,
        *,
        weight: object = FontWeight.NORMAL,
        color_code: ColorCode = ColorCode.PRIMARY,
        color: Optional[str] = None,
        size: FontSize = FontSize.REGULAR,
        align: Align = Align.LEFT,
        margin_top: float = 0.0,
        max_width: Optional[float] = None,
    ) -> float:
        self.cursor.y += margin_top

        self.canvas.set_font(self.resolve_font(weight))
        self.canvas.set_fill_color(color or self.style.text.color_for(ColorCode(color_code)))
        self.canvas.set_font_size(self.style.text.size_for(FontSize(size)))

        metrics = self.canvas.draw_text(
            _text(self.value_or_transliterate(text)),
            self.cursor.x,
            self.cursor.y,
            width=max_width,
            align=Align(align).value,
            letter_spacing=config.LETTER_SPACING,
        )
        self.cursor.y = metrics.end_y
        return metrics.end_y

    # -------------------- Table --------------------
    def check_row(self, cells: Sequence[Cell], what: str = "row") -> None:
        if len(cells) < 2:
            raise InvalidRowError(
                f"{what} has {len(cells)} cell(s); a row needs a description and at least one value column"
            )
        if len(cells) > 3:
            raise UnsupportedTableError(
                f"{what} has {len(cells)} cells; only description, quantity and total columns are supported"
            )

    def first_column_width(self, columns: int) -> float:
        left = self.canvas.margins.left
        if columns == 2:
            return self.style.table.total.position - left - config.COLUMN_GAP
        return (left + self.canvas.width - self.canvas.margins.right) / (columns - 2)

    def column_slot(self, index: int, columns: int, first_width: float) -> Tuple[float, float, Align]:
        table = self.style.table
        if index == 0:
            return self.canvas.margins.left, first_width, Align.LEFT
        if columns > 2 and index == 1:
            return table.quantity.position, table.quantity.max_width, Align.LEFT
        return table.total.position, table.total.max_width, Align.RIGHT

    def table_row(self, kind: RowKind, cells: Sequence[Cell], row_top: float) -> float:
        """
        Draw one row with every column starting at ``row_top``.

        Returns the row height: the tallest column including its subtext and
        sub-item rows. The cursor ends at the left margin directly below it.
        """
        self.check_row(cells, f"{kind.name.lower()} row")
        first_width = self.first_column_width(len(cells))
        max_height = 0.0

        for index, cell in enumerate(cells):
            x, width, align = self.column_slot(index, len(cells), first_width)
            self.move_to(x, row_top)

            value: object = cell.value
            if cell.is_price:
                value = pretty_price(cell.value, self.document.currency)
                align = Align.RIGHT

            self.set_text(value, weight=kind.weight, color_code=kind.color_code, max_width=width, align=align)

            if cell.subtext:
                self.move_down(config.SUBTEXT_GAP_LINES)
                self.set_text(
                    cell.subtext.strip(),
                    weight=kind.weight,
                    color_code=ColorCode.SECONDARY,
                    max_width=width,
                )

            if cell.subitems:
                self.move_down(config.SUBTEXT_GAP_LINES)
                for subitem in cell.subitems:
                    self.table_row(RowKind.SUBITEM, _subitem_cells(subitem), self.cursor.y)
                    self.move_down(config.SUBITEM_GAP_LINES)

            max_height = max(max_height, self.cursor.y - row_top)

        self.move_to(self.canvas.margins.left, row_top + max_height)
        return max_height

    def separator(self) -> None:
        margins = self.canvas.margins
        self.move_down(config.SEPARATOR_ABOVE_LINES)
        line_y = self.cursor.y - 1
        self.canvas.stroke_line(
            margins.left - config.SEPARATOR_OVERHANG,
            line_y,
            self.canvas.width - margins.right,
            line_y,
            color=config.SEPARATOR_COLOR,
            line_width=1.0,
        )
        self.move_down(config.SEPARATOR_BELOW_LINES)


def _subitem_cells(subitem: SubItem) -> List[Cell]:
    return [
        Cell(value=subitem.description),
        Cell(value=subitem.date),
        Cell(value=subitem.price, is_price=True),
    ]
