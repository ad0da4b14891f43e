from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from . import config


Scalar = Union[str, int, float]


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"

    @classmethod
    def coerce(cls, value: object) -> "FontWeight":
        try:
            return cls(value)
        except ValueError:
            return cls.NORMAL


class ColorCode(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class FontSize(str, Enum):
    TITLE = "title"
    HEADING = "heading"
    REGULAR = "regular"


class Align(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class _Model(BaseModel):
    # JSON documents use camelCase keys; Python callers may use field names.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# -------------------- Style --------------------
class FontSpec(_Model):
    name: str
    path: Optional[Path] = None


class FallbackFont(_Model):
    enabled: bool = True
    range: Optional[str] = None

    @field_validator("range")
    @classmethod
    def _check_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"Invalid fallback range pattern: {exc}") from exc
        return value

    def matches(self, value: object) -> bool:
        if not self.enabled or not self.range:
            return False
        return re.search(self.range, str(value if value is not None else "")) is not None


class Fonts(_Model):
    normal: FontSpec = Field(default_factory=lambda: FontSpec(name="Helvetica"))
    bold: FontSpec = Field(default_factory=lambda: FontSpec(name="Helvetica-Bold"))
    fallback: Optional[FallbackFont] = None

    def for_weight(self, weight: FontWeight) -> FontSpec:
        return self.bold if weight == FontWeight.BOLD else self.normal


class HeaderStyle(_Model):
    background_color: str = "#F8F8FA"
    height: float = Field(150.0, gt=0)
    text_position: float = Field(330.0, gt=0)


class ColumnSlot(_Model):
    position: float = Field(gt=0)
    max_width: float = Field(gt=0)


class TableStyle(_Model):
    quantity: ColumnSlot = Field(default_factory=lambda: ColumnSlot(position=330, max_width=140))
    total: ColumnSlot = Field(default_factory=lambda: ColumnSlot(position=475, max_width=80))

    @model_validator(mode="after")
    def _check_order(self) -> "TableStyle":
        if self.quantity.position >= self.total.position:
            raise ValueError(
                f"table.quantity.position ({self.quantity.position:g}) must be left of "
                f"table.total.position ({self.total.position:g})"
            )
        return self


class TextStyle(_Model):
    primary_color: str = "#000100"
    secondary_color: str = "#8F8F8F"
    title_size: float = Field(30.0, gt=0)
    heading_size: float = Field(15.0, gt=0)
    regular_size: float = Field(10.0, gt=0)

    def color_for(self, code: ColorCode) -> str:
        if code == ColorCode.SECONDARY:
            return self.secondary_color
        return self.primary_color

    def size_for(self, size: FontSize) -> float:
        if size == FontSize.TITLE:
            return self.title_size
        if size == FontSize.HEADING:
            return self.heading_size
        return self.regular_size


class DocumentStyle(_Model):
    size: str = "A4"
    margin: float = Field(config.DEFAULT_MARGIN, ge=0)

    @field_validator("size")
    @classmethod
    def _known_size(cls, value: str) -> str:
        size = str(value).strip().upper()
        if size not in config.PAGE_SIZES:
            raise ValueError(f"Unsupported page size: {value} (expected one of {', '.join(config.PAGE_SIZES)})")
        return size

    @property
    def page_size(self) -> Tuple[float, float]:
        return config.PAGE_SIZES[self.size]


class StyleConfig(_Model):
    """
    Look of one document. Resolved and validated once, before anything is drawn.
    """

    fonts: Fonts = Field(default_factory=Fonts)
    header: HeaderStyle = Field(default_factory=HeaderStyle)
    table: TableStyle = Field(default_factory=TableStyle)
    text: TextStyle = Field(default_factory=TextStyle)
    document: DocumentStyle = Field(default_factory=DocumentStyle)

    @model_validator(mode="after")
    def _fits_page(self) -> "StyleConfig":
        page_w, _ = self.document.page_size
        total_end = self.table.total.position + self.table.total.max_width
        if total_end > page_w:
            raise ValueError(f"table.total column ends at {total_end:g}, beyond the page width {page_w:g}")
        if self.header.text_position >= page_w:
            raise ValueError(f"header.textPosition ({self.header.text_position:g}) is outside the page")
        return self

    @classmethod
    def from_preset(cls, path: Path | None = None) -> "StyleConfig":
        return cls.model_validate(config.load_style_preset(path))


# -------------------- Document --------------------
class SubItem(_Model):
    description: Scalar = ""
    date: Optional[Scalar] = None
    price: Optional[Scalar] = None


class Cell(_Model):
    value: Optional[Scalar] = None
    is_price: bool = False
    subtext: Optional[str] = None
    subitems: List[SubItem] = Field(default_factory=list)


Row = List[Cell]


class LabeledValue(_Model):
    label: str = ""
    value: Union[Scalar, List[Scalar], None] = None

    @property
    def values(self) -> List[Scalar]:
        if self.value is None:
            return []
        if isinstance(self.value, list):
            return list(self.value)
        return [self.value]


class TotalLine(_Model):
    label: str
    value: Optional[Scalar] = None
    is_price: bool = False


class LegalLine(_Model):
    value: str
    weight: FontWeight = FontWeight.NORMAL
    color: Optional[str] = None

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: object) -> FontWeight:
        return FontWeight.coerce(value)


def _default_details_header() -> List[Cell]:
    return [Cell(value="Description"), Cell(value="Quantity"), Cell(value="Subtotal")]


class DocumentSpec(_Model):
    name: str = "Invoice"
    header: List[LabeledValue] = Field(default_factory=list)
    customer: Optional[List[LabeledValue]] = None
    seller: Optional[List[LabeledValue]] = None
    currency: Optional[str] = None
    details_header: List[Cell] = Field(default_factory=_default_details_header)
    line_items: List[Row] = Field(default_factory=list)
    totals: List[TotalLine] = Field(default_factory=list)
    legal: List[LegalLine] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        code = value.strip().upper()
        return code or None

    @classmethod
    def from_file(cls, path: Path) -> "DocumentSpec":
        if not path.exists():
            raise FileNotFoundError(f"Document spec not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            return cls.model_validate(json.load(handle))
