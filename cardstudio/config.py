from __future__ import annotations

from pathlib import Path


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "cardstudio.db"
FONT_DIR = OUT_DIR / "fonts"

API_BASE_URL = "http://127.0.0.1:8000/api"
FONT_CSS_URL = "https://fonts.googleapis.com/css2?family={family}&display=swap"
REQUEST_TIMEOUT = 15.0

# Auto-fit
MIN_FONT_SIZE = 10
DEFAULT_FONT_SIZE = 32
BODY_ZONE_THRESHOLD = 200
BODY_PADDING = 20
LINE_HEIGHT = 1.2

# Admin defaults
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_COLOR = "#000"
DEFAULT_MAX_CHARS = 200
DEFAULT_PLACEHOLDER = "Type here"

# Layout
STATIC_FONT_FACTOR = 0.8
PLACEHOLDER_OPACITY = 0.4
SPREAD_WIDTH_FACTOR = 2.1
FLIP_DURATION_MS = 700

Z_BACKGROUND = 0
Z_STATIC = 5
Z_DYNAMIC = 10

PROOF_STYLE = {
    "page_margin": 36,
    "page_fill": "#FFFFFF",
    "spread_gap": 0.1,
    "placeholder_stroke": "#A1A1AA",
    "label_color": "#6B7280",
    "label_size": 9,
}


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH, FONT_DIR
    OUT_DIR = path
    DB_PATH = OUT_DIR / "cardstudio.db"
    FONT_DIR = OUT_DIR / "fonts"


def set_font_dir(path: Path) -> None:
    global FONT_DIR
    FONT_DIR = path
