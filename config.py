"""
Configuration constants for MtgProxyBuilder.
"""

import os
from typing import Dict, Tuple, Set

# --- Physical geometry (millimetres) ---
CARD_WIDTH_MM = 63.0
CARD_HEIGHT_MM = 88.0

# A4 portrait
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0

GRID_COLS = 3
GRID_ROWS = 3
CARDS_PER_PAGE = GRID_COLS * GRID_ROWS

# Centre the grid on the page
MARGIN_X_MM = (PAGE_WIDTH_MM - GRID_COLS * CARD_WIDTH_MM) / 2  # 10.5mm
MARGIN_Y_MM = (PAGE_HEIGHT_MM - GRID_ROWS * CARD_HEIGHT_MM) / 2  # 16.5mm

# Preview raster: 1mm = 2.5px
PREVIEW_SCALE = 2.5

# --- Cut guides ---
CORNER_MARK_LENGTH_MM = 4.0
CUT_LINE_DASH_MM: Tuple[float, float] = (2.0, 2.0)
DEFAULT_CUT_LINE_COLOR = "#808080"
DEFAULT_CUT_LINE_WIDTH = "0.2mm"

class CutLineStyle:
    NONE = "none"
    CORNERS = "corners"
    GRID = "grid"
    ALL = (NONE, CORNERS, GRID)

class ImageQuality:
    PNG = "png"
    LARGE = "large"
    NORMAL = "normal"
    BORDER_CROP = "border_crop"
    ALL = (PNG, LARGE, NORMAL, BORDER_CROP)

# --- Scryfall ---
SCRYFALL_API_URL = "https://api.scryfall.com"
SCRYFALL_BULK_DATA_URL = f"{SCRYFALL_API_URL}/bulk-data"
SCRYFALL_IMAGE_CDN = "https://cards.scryfall.io"
BULK_DATA_TYPE = "unique_artwork"
HTTP_USER_AGENT = "MtgProxyBuilder/1.0"
API_TIMEOUT_SECONDS = 15
IMAGE_TIMEOUT_SECONDS = 30
BULK_DOWNLOAD_TIMEOUT_SECONDS = 300

# Scryfall asks for 50-100ms between requests. Not a tunable.
REQUEST_INTERVAL_SECONDS = 0.08

# Layouts where image_uris live on card_faces instead of the card root
DOUBLE_FACED_LAYOUTS: Set[str] = {
    "transform", "modal_dfc", "reversible_card", "art_series", "double_faced_token",
}

# --- Local card data ---
DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
DEFAULT_CARD_DATA_PATH = os.path.join(DATA_DIR, "cards.json")
DEFAULT_CARD_META_PATH = os.path.join(DATA_DIR, "meta.json")

DIMENSION_UNITS_TO_MM: Dict[str, float] = {
    "mm": 1.0, "in": 25.4, "\"": 25.4, "pt": 25.4 / 72.0,
}
