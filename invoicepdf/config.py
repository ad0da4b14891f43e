from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple
import json

from reportlab.lib.pagesizes import A4, LETTER


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
STYLE_PRESET_PATH = BASE_DIR / "assets" / "styles" / "classic.json"

PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
}

DEFAULT_MARGIN = 30.0

# Vertical flow (points)
SECTION_GAP = 18.0
LEGAL_GAP = 30.0
TOTALS_ROW_GAP = 12.0
HEADER_LINE_GAP = 4.0
PARTY_LABEL_GAP = 8.0
PARTY_VALUE_GAP = 4.0
LEGAL_LINE_GAP = 10.0
PARTY_MAX_WIDTH = 250.0

# Moves expressed in lines of the current font
SUBTEXT_GAP_LINES = 0.5
SUBITEM_GAP_LINES = 0.25
TABLE_TRAILING_LINES = 0.5
SEPARATOR_ABOVE_LINES = 0.4
SEPARATOR_BELOW_LINES = 0.6

SEPARATOR_COLOR = "#F0F0F0"
SEPARATOR_OVERHANG = 10.0
LETTER_SPACING = 0.05
COLUMN_GAP = 10.0


def load_style_preset(path: Path | None = None) -> dict:
    preset = path or STYLE_PRESET_PATH
    if not preset.exists():
        raise FileNotFoundError(f"Style preset not found: {preset}")
    with preset.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR
    OUT_DIR = path
