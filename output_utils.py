"""
Output utilities for MtgProxyBuilder.
"""

import os
from typing import List, Optional

from PIL import Image, ImageDraw

from card_processing import CardSlot, Diagnostic
from config import CUT_LINE_DASH_MM, PAGE_HEIGHT_MM, PAGE_WIDTH_MM, PREVIEW_SCALE
from page_layout import CutGuideSettings, Page, cut_guide_segments, dash_segment, scale_rect, scale_segment

def render_preview_page(page: Page, cut_settings: CutGuideSettings, scale: float = PREVIEW_SCALE) -> Image.Image:
    """Draws one page onto a white raster at `scale` pixels per millimetre."""
    page_img = Image.new("RGB", (round(PAGE_WIDTH_MM * scale), round(PAGE_HEIGHT_MM * scale)), "white")
    for acquired, rect in page.placements:
        x, y, w, h = scale_rect(rect, scale)
        card_img = acquired.image.resize((round(w), round(h)))
        page_img.paste(card_img, (round(x), round(y)))

    segments = cut_guide_segments(page.cards_on_page, cut_settings.style)
    if segments:
        draw = ImageDraw.Draw(page_img)
        line_width = max(1, round(cut_settings.width_mm * scale))
        for segment in segments:
            # Pillow has no dash support; split in millimetres, then scale
            pieces = dash_segment(segment, *CUT_LINE_DASH_MM) if cut_settings.dashed else [segment]
            for piece in pieces:
                x1, y1, x2, y2 = scale_segment(piece, scale)
                draw.line([(x1, y1), (x2, y2)], fill=cut_settings.color, width=line_width)
    return page_img

def render_preview_pages(pages: List[Page], cut_settings: CutGuideSettings, scale: float = PREVIEW_SCALE) -> List[Image.Image]:
    return [render_preview_page(page, cut_settings, scale) for page in pages]

def create_png_output(pages: List[Page], output_path: str, cut_settings: CutGuideSettings, scale: float = PREVIEW_SCALE, debug: bool = False) -> List[str]:
    """Saves each page as '<base>-<n>.png'. Returns the written paths."""
    print(f"\n--- PNG Page Generation (PIL-based) ---")
    print(f"Output file: {output_path}")
    if debug: print(f"DEBUG: Preview scale {scale}px/mm")
    written: List[str] = []
    base, ext = os.path.splitext(output_path)
    for page in pages:
        page_img = render_preview_page(page, cut_settings, scale)
        page_filename = f"{base}-{page.index + 1}{ext or '.png'}"
        page_img.save(page_filename, format='PNG', compress_level=6)
        print(f"PNG page {page.index + 1} saved to {page_filename}")
        written.append(page_filename)
    return written

def print_selection_manifest(slots: List[CardSlot]):
    """Prints a formatted summary of which card versions were selected."""
    if not slots:
        return
    print("\n--- Card Selection Manifest ---")
    for slot in slots:
        if slot.selected is None:
            print(f"{slot.quantity}x {slot.name}: NOT FOUND ({slot.error})")
            continue
        record = slot.selected
        face_note = " (double-faced)" if record.is_double_faced else ""
        print(f"{slot.quantity}x {record.name}: {record.set_code.upper()} {record.collector_number}{face_note}, {len(slot.variants)} variant(s)")
        if slot.warning:
            print(f"  ! {slot.warning}")
    print("-----------------------------")

def print_variant_listing(slots: List[CardSlot]):
    """Lists every alternate art per slot, in the format accepted by --variant."""
    print("\n--- Available Variants ---")
    for slot in slots:
        if slot.selected is None:
            continue
        print(f"{slot.selected.name}:")
        for record in slot.variants:
            marker = "*" if record == slot.selected else " "
            print(f"  {marker} {record.name}:{record.set_code.upper()}:{record.collector_number}")
    print("--------------------------")

def print_diagnostics(diagnostics: List[Diagnostic]):
    if not diagnostics:
        return
    print("\n--- Diagnostics ---")
    for diagnostic in diagnostics:
        print(f"  [{diagnostic.kind}] {diagnostic.message}")
    print("-------------------")

def write_diagnostics_file(card_list_path: Optional[str], diagnostics: List[Diagnostic]) -> Optional[str]:
    """Writes '<card_list>_diagnostics.txt' next to the card list. Returns the path written."""
    if not diagnostics or not card_list_path: return None
    card_list_dir = os.path.dirname(card_list_path)
    card_list_basename_no_ext = os.path.splitext(os.path.basename(card_list_path))[0]
    diagnostics_filename = f"{card_list_basename_no_ext}_diagnostics.txt"
    diagnostics_filepath = os.path.join(card_list_dir, diagnostics_filename) if card_list_dir else diagnostics_filename
    try:
        with open(diagnostics_filepath, 'w', encoding='utf-8') as f:
            for diagnostic in diagnostics: f.write(f"[{diagnostic.kind}] {diagnostic.message}\n")
        print(f"Diagnostics saved to: {diagnostics_filepath}")
        return diagnostics_filepath
    except IOError as e:
        print(f"Error writing diagnostics file '{diagnostics_filepath}': {e}")
        return None
