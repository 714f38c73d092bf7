from PIL import Image

from card_processing import CardSlot, Diagnostic, DiagnosticKind, ImageRequest
from conftest import BOLT_2XM, BOLT_LEB
from image_handler import AcquiredImage
from output_utils import (
    create_png_output, print_variant_listing, render_preview_page, write_diagnostics_file,
)
from page_layout import CutGuideSettings, paginate

RED = (255, 0, 0)
CARD_BLUE = (10, 120, 200)


def make_pages(count: int):
    img = Image.new("RGB", (63, 88), CARD_BLUE)
    request = ImageRequest("u", "large", "front", "Sol Ring", 0)
    return paginate([AcquiredImage(request, img) for _ in range(count)])


class TestRenderPreviewPage:
    def test_page_size_and_card_placement(self) -> None:
        page_img = render_preview_page(make_pages(1)[0], CutGuideSettings(), scale=2.5)

        assert page_img.size == (525, 742)
        # First cell spans (10.5, 16.5)-(73.5, 104.5) mm
        assert page_img.getpixel((100, 150)) == CARD_BLUE
        assert page_img.getpixel((5, 5)) == (255, 255, 255)
        # Second cell is empty
        assert page_img.getpixel((250, 150)) == (255, 255, 255)

    def test_corner_marks_drawn_outside_card(self) -> None:
        settings = CutGuideSettings("corners", "#ff0000", 0.4)
        page_img = render_preview_page(make_pages(1)[0], settings, scale=2.5)
        # Horizontal arm of the top-left mark: y = 16.5mm, x from 6.5 to 10.5 mm
        assert page_img.getpixel((21, 41)) == RED

    def test_no_guides_for_none(self) -> None:
        page_img = render_preview_page(make_pages(1)[0], CutGuideSettings("none"), scale=2.5)
        assert page_img.getpixel((21, 41)) == (255, 255, 255)

    def test_dashed_grid_leaves_gaps(self) -> None:
        settings = CutGuideSettings("grid", "#ff0000", 0.4, dashed=True)
        page_img = render_preview_page(make_pages(3)[0], settings, scale=10)
        # Top grid line at y = 165px over the card edge; dashes start at x = 105px, 20px on, 20px off
        row = [page_img.getpixel((x, 165)) for x in range(110, 190)]
        assert RED in row
        assert any(pixel != RED for pixel in row)


class TestCreatePngOutput:
    def test_one_file_per_page(self, tmp_path) -> None:
        output = tmp_path / "deck.png"
        written = create_png_output(make_pages(10), str(output), CutGuideSettings("grid"), scale=1)

        assert written == [str(tmp_path / "deck-1.png"), str(tmp_path / "deck-2.png")]
        with Image.open(written[0]) as img:
            assert img.size == (210, 297)


class TestDiagnosticsOutput:
    def test_write_diagnostics_file(self, tmp_path) -> None:
        card_list = tmp_path / "deck.txt"
        diagnostics = [
            Diagnostic(DiagnosticKind.NOT_FOUND, "Card not found: \"Nope\"", 0),
            Diagnostic(DiagnosticKind.IMAGE_FAILURE, "Image load failed", 1),
        ]

        path = write_diagnostics_file(str(card_list), diagnostics)

        assert path == str(tmp_path / "deck_diagnostics.txt")
        assert (tmp_path / "deck_diagnostics.txt").read_text(encoding="utf-8").splitlines() == [
            "[not_found] Card not found: \"Nope\"",
            "[image_failure] Image load failed",
        ]

    def test_nothing_written_without_diagnostics(self, tmp_path) -> None:
        assert write_diagnostics_file(str(tmp_path / "deck.txt"), []) is None
        assert list(tmp_path.iterdir()) == []

    def test_variant_listing_marks_selection(self, capsys) -> None:
        slot = CardSlot("Lightning Bolt", 1)
        slot.selected = BOLT_LEB
        slot.variants = [BOLT_2XM, BOLT_LEB]

        print_variant_listing([slot])

        out = capsys.readouterr().out
        assert "    Lightning Bolt:2XM:117" in out
        assert "  * Lightning Bolt:LEB:161" in out
