import io

import pytest
from PIL import Image
from reportlab.lib.units import mm

from card_processing import ImageRequest
from image_handler import AcquiredImage
from page_layout import CutGuideSettings, Rect, Segment, paginate
from pdf_generator import create_pdf_sheets, pdf_rect, pdf_segment


def make_images(count: int):
    img = Image.new("RGB", (63, 88), (10, 120, 200))
    request = ImageRequest("u", "large", "front", "Sol Ring", 0)
    return [AcquiredImage(request, img) for _ in range(count)]


class TestCoordinates:
    def test_rect_is_flipped_to_bottom_left_origin(self) -> None:
        x, y, w, h = pdf_rect(Rect(10.5, 16.5, 63, 88))
        assert x == pytest.approx(10.5 * mm)
        assert y == pytest.approx((297 - 16.5 - 88) * mm)
        assert (w, h) == (pytest.approx(63 * mm), pytest.approx(88 * mm))

    def test_segment_flip(self) -> None:
        x1, y1, x2, y2 = pdf_segment(Segment(0, 0, 10, 297))
        assert (x1, y1) == (0, pytest.approx(297 * mm))
        assert (x2, y2) == (pytest.approx(10 * mm), 0)


class TestCreatePdfSheets:
    @pytest.mark.parametrize("style", ["none", "corners", "grid"])
    def test_writes_one_page_per_layout_page(self, style: str) -> None:
        buffer = io.BytesIO()
        pages = paginate(make_images(10))

        written = create_pdf_sheets(pages, buffer, CutGuideSettings(style, "#ff0000", 0.3, style == "grid"))

        data = buffer.getvalue()
        assert written == 2
        assert data.startswith(b"%PDF")
        assert b"/Count 2" in data

    def test_no_pages(self) -> None:
        buffer = io.BytesIO()
        assert create_pdf_sheets([], buffer, CutGuideSettings()) == 0
        assert buffer.getvalue() == b""

    def test_writes_file(self, tmp_path) -> None:
        output = tmp_path / "deck.pdf"
        assert create_pdf_sheets(paginate(make_images(1)), str(output), CutGuideSettings("corners")) == 1
        assert output.read_bytes().startswith(b"%PDF")
