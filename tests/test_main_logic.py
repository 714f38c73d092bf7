import json
import sys

import pytest

import main_logic
from conftest import make_image_bytes


@pytest.fixture
def card_data(tmp_path):
    cards = [
        {"n": "Lightning Bolt", "id": "a1b2c3d4", "s": "2xm", "cn": "117", "o": "oracle-bolt"},
        {"n": "Lightning Bolt", "id": "b2c3d4e5", "s": "leb", "cn": "161", "o": "oracle-bolt"},
        {"n": "Sol Ring", "id": "e5f6a7b8", "s": "cmd", "cn": "261", "o": "oracle-sol"},
    ]
    path = tmp_path / "cards.json"
    path.write_text(json.dumps(cards), encoding="utf-8")
    return path


def run_main(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["MtgProxyBuilder.py", *args])
    main_logic.main()


def test_list_variants_fetches_nothing(monkeypatch, tmp_path, card_data, capsys) -> None:
    card_list = tmp_path / "deck.txt"
    card_list.write_text("4 Lightning Bolt [LEB]\n1 Sol Ring\n", encoding="utf-8")
    monkeypatch.setattr(main_logic.ScryfallClient, "fetch_image", lambda self, url: pytest.fail("fetched an image"))

    run_main(monkeypatch, "--card-list", str(card_list), "--card-data", str(card_data), "--offline", "--list-variants")

    out = capsys.readouterr().out
    assert "3 cards loaded" in out
    assert "  * Lightning Bolt:LEB:161" in out
    assert "    Lightning Bolt:2XM:117" in out


def test_builds_pdf_with_variant_override(monkeypatch, tmp_path, card_data, capsys) -> None:
    card_list = tmp_path / "deck.txt"
    card_list.write_text("2 Lightning Bolt\nMissing Card\n", encoding="utf-8")
    fetched = []
    def fake_fetch(self, url):
        fetched.append(url)
        return make_image_bytes()
    monkeypatch.setattr(main_logic.ScryfallClient, "fetch_image", fake_fetch)

    run_main(monkeypatch, "--card-list", str(card_list), "--card-data", str(card_data), "--offline",
             "--variant", "Lightning Bolt:LEB", "--cut-lines", "corners")

    assert fetched == ["https://cards.scryfall.io/large/front/b/2/b2c3d4e5.jpg"]
    assert (tmp_path / "deck.pdf").read_bytes().startswith(b"%PDF")
    assert "Card not found: \"Missing Card\"" in (tmp_path / "deck_diagnostics.txt").read_text(encoding="utf-8")


def test_nothing_printable(monkeypatch, tmp_path, card_data, capsys) -> None:
    card_list = tmp_path / "deck.txt"
    card_list.write_text("Missing Card\n", encoding="utf-8")

    run_main(monkeypatch, "--card-list", str(card_list), "--card-data", str(card_data), "--offline")

    assert "No images to print. Exiting." in capsys.readouterr().out
    assert not (tmp_path / "deck.pdf").exists()


def test_invalid_cut_line_width(monkeypatch, tmp_path) -> None:
    card_list = tmp_path / "deck.txt"
    card_list.write_text("Sol Ring\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        run_main(monkeypatch, "--card-list", str(card_list), "--cut-line-width", "wide")
