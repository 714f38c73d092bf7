"""
PDF generation for MtgProxyBuilder.
"""

import io
from typing import List, Union

from reportlab.lib import colors as reportlab_colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from config import CUT_LINE_DASH_MM, PAGE_HEIGHT_MM
from page_layout import CutGuideSettings, Page, Rect, Segment, cut_guide_segments

def pdf_rect(rect: Rect) -> tuple:
    """Page millimetres (top-left origin) -> PDF points (bottom-left origin) as (x, y, w, h)."""
    return rect.x * mm, (PAGE_HEIGHT_MM - rect.y - rect.height) * mm, rect.width * mm, rect.height * mm

def pdf_segment(segment: Segment) -> tuple:
    return segment.x1 * mm, (PAGE_HEIGHT_MM - segment.y1) * mm, segment.x2 * mm, (PAGE_HEIGHT_MM - segment.y2) * mm

def draw_cut_guides_pdf(c: canvas.Canvas, page: Page, cut_settings: CutGuideSettings):
    segments = cut_guide_segments(page.cards_on_page, cut_settings.style)
    if not segments: return
    c.saveState()
    c.setStrokeColor(reportlab_colors.HexColor(cut_settings.color)); c.setLineWidth(cut_settings.width_mm * mm)
    if cut_settings.dashed: c.setDash([CUT_LINE_DASH_MM[0] * mm, CUT_LINE_DASH_MM[1] * mm], 0)
    else: c.setDash([], 0)
    for segment in segments:
        c.line(*pdf_segment(segment))
    c.restoreState()

def create_pdf_sheets(pages: List[Page], output_path_or_buffer: Union[str, io.BytesIO], cut_settings: CutGuideSettings, debug: bool = False) -> int:
    """Writes one A4 PDF page per layout page. Returns the number of pages written."""
    if isinstance(output_path_or_buffer, str): print(f"\n--- PDF Generation (ReportLab: {output_path_or_buffer}) ---")
    else: print(f"\n--- PDF Generation (ReportLab to memory buffer) ---")
    if not pages: print("No pages for PDF."); return 0
    print(f"  Cut lines: {cut_settings.style}" + (f" ({cut_settings.color}, {cut_settings.width_mm:.2f}mm, {'dashed' if cut_settings.dashed else 'solid'})" if cut_settings.style != "none" else ""))
    c = canvas.Canvas(output_path_or_buffer, pagesize=A4)
    for page in pages:
        for slot_num, (acquired, rect) in enumerate(page.placements):
            x, y, w, h = pdf_rect(rect)
            try: c.drawImage(ImageReader(acquired.image), x, y, width=w, height=h)
            except Exception as e: print(f"  Warning: Could not draw '{acquired.request.card_name}' at position {slot_num + 1} on page {page.index + 1}: {e}")
        draw_cut_guides_pdf(c, page, cut_settings)
        if debug: print(f"DEBUG: PDF page {page.index + 1}: {page.cards_on_page} card(s)")
        c.showPage()
    c.save()
    if isinstance(output_path_or_buffer, str): print(f"ReportLab PDF generation complete: {output_path_or_buffer} ({len(pages)} page(s))")
    else: print(f"ReportLab PDF generation to memory buffer complete ({len(pages)} page(s))")
    return len(pages)
