"""
Page layout and cut-guide geometry for MtgProxyBuilder.

Everything here is in page-relative millimetres with the origin at the top-left
corner of the page. Render backends only apply a uniform scale (the PDF backend
also flips the y axis), so the preview and the exported PDF share one geometry.
"""

import math
from typing import Any, List, NamedTuple, Sequence, Tuple

from config import (
    CARD_HEIGHT_MM, CARD_WIDTH_MM, CARDS_PER_PAGE, CORNER_MARK_LENGTH_MM, DEFAULT_CUT_LINE_COLOR,
    GRID_COLS, GRID_ROWS, MARGIN_X_MM, MARGIN_Y_MM, CutLineStyle,
)

class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

class Segment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

class Page(NamedTuple):
    index: int
    placements: List[Tuple[Any, Rect]]
    cards_on_page: int

class CutGuideSettings(NamedTuple):
    style: str = CutLineStyle.NONE
    color: str = DEFAULT_CUT_LINE_COLOR
    width_mm: float = 0.2
    dashed: bool = False

def page_count(total_items: int, cols: int = GRID_COLS, rows: int = GRID_ROWS) -> int:
    return math.ceil(total_items / (cols * rows))

def cell_rect(row: int, col: int) -> Rect:
    return Rect(MARGIN_X_MM + col * CARD_WIDTH_MM, MARGIN_Y_MM + row * CARD_HEIGHT_MM, CARD_WIDTH_MM, CARD_HEIGHT_MM)

def paginate(items: Sequence[Any], cols: int = GRID_COLS, rows: int = GRID_ROWS) -> List[Page]:
    """Splits items into pages, filling each grid row-major; only the last page may be partial."""
    per_page = cols * rows
    pages: List[Page] = []
    for page_index in range(page_count(len(items), cols, rows)):
        start = page_index * per_page
        page_items = items[start:start + per_page]
        placements = [(item, cell_rect(i // cols, i % cols)) for i, item in enumerate(page_items)]
        pages.append(Page(page_index, placements, len(page_items)))
    return pages

def cards_on_page(total_items: int, page_index: int, per_page: int = CARDS_PER_PAGE) -> int:
    return max(0, min(total_items - page_index * per_page, per_page))

def corner_mark_segments(cards_on_page: int, cols: int = GRID_COLS, mark_len: float = CORNER_MARK_LENGTH_MM) -> List[Segment]:
    """Eight segments (four L-shapes) per filled cell, pointing away from the card."""
    segments: List[Segment] = []
    for i in range(cards_on_page):
        x1, y1, w, h = cell_rect(i // cols, i % cols)
        x2 = x1 + w; y2 = y1 + h
        segments.extend([
            # Top-left
            Segment(x1 - mark_len, y1, x1, y1), Segment(x1, y1 - mark_len, x1, y1),
            # Top-right
            Segment(x2, y1, x2 + mark_len, y1), Segment(x2, y1 - mark_len, x2, y1),
            # Bottom-left
            Segment(x1 - mark_len, y2, x1, y2), Segment(x1, y2, x1, y2 + mark_len),
            # Bottom-right
            Segment(x2, y2, x2 + mark_len, y2), Segment(x2, y2, x2, y2 + mark_len),
        ])
    return segments

def grid_line_segments(cards_on_page: int, cols: int = GRID_COLS) -> List[Segment]:
    """
    Rectilinear grid over the filled cells only. The bottom line of a short last
    row spans just that row's cards, and vertical lines right of the last row's
    cards stop one row early.
    """
    if cards_on_page <= 0:
        return []
    filled_cols = min(cards_on_page, cols)
    filled_rows = math.ceil(cards_on_page / cols)
    last_row_cols = cards_on_page - (filled_rows - 1) * cols

    segments: List[Segment] = []
    for row in range(filled_rows + 1):
        y = MARGIN_Y_MM + row * CARD_HEIGHT_MM
        span_cols = last_row_cols if row == filled_rows else filled_cols
        segments.append(Segment(MARGIN_X_MM, y, MARGIN_X_MM + span_cols * CARD_WIDTH_MM, y))
    for col in range(filled_cols + 1):
        x = MARGIN_X_MM + col * CARD_WIDTH_MM
        span_rows = filled_rows if col <= last_row_cols else filled_rows - 1
        segments.append(Segment(x, MARGIN_Y_MM, x, MARGIN_Y_MM + span_rows * CARD_HEIGHT_MM))
    return segments

def cut_guide_segments(cards_on_page: int, style: str) -> List[Segment]:
    if style == CutLineStyle.NONE or cards_on_page <= 0:
        return []
    if style == CutLineStyle.CORNERS:
        return corner_mark_segments(cards_on_page)
    if style == CutLineStyle.GRID:
        return grid_line_segments(cards_on_page)
    raise ValueError(f"Unknown cut line style '{style}'. Supported: {', '.join(CutLineStyle.ALL)}")

def dash_segment(segment: Segment, on_len: float, off_len: float) -> List[Segment]:
    """Splits a segment into dash pieces, starting with a dash at (x1, y1)."""
    total = segment.length
    if total == 0 or on_len <= 0:
        return [segment]
    dx = (segment.x2 - segment.x1) / total; dy = (segment.y2 - segment.y1) / total
    pieces: List[Segment] = []
    pos = 0.0
    while pos < total:
        end = min(pos + on_len, total)
        pieces.append(Segment(segment.x1 + dx * pos, segment.y1 + dy * pos, segment.x1 + dx * end, segment.y1 + dy * end))
        pos = end + off_len
    return pieces

def scale_segment(segment: Segment, scale: float) -> Segment:
    return Segment(segment.x1 * scale, segment.y1 * scale, segment.x2 * scale, segment.y2 * scale)

def scale_rect(rect: Rect, scale: float) -> Rect:
    return Rect(rect.x * scale, rect.y * scale, rect.width * scale, rect.height * scale)
