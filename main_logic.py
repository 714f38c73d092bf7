"""
Main logic for MtgProxyBuilder.
"""

import argparse
import os
import sys

from card_data_sync import update_card_data
from card_index import load_card_index
from card_processing import find_variant
from config import (
    DEFAULT_CARD_DATA_PATH, DEFAULT_CUT_LINE_COLOR, DEFAULT_CUT_LINE_WIDTH, CutLineStyle, ImageQuality,
)
from image_handler import print_progress
from output_utils import (
    create_png_output, print_diagnostics, print_selection_manifest, print_variant_listing,
    write_diagnostics_file,
)
from page_layout import CutGuideSettings
from parsing_utils import format_hex_color, parse_dimension_to_mm, parse_hex_color, parse_variant_override
from pdf_generator import create_pdf_sheets
from proxy_session import ProxySession
from web_utils import RateLimiter, ScryfallClient

def main():
    parser = argparse.ArgumentParser(
        description="Build print-ready 3x3 proxy sheets from a card list.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter #type: ignore
    )
    # --- Input/Output Control ---
    io_group = parser.add_argument_group('Input and Output')
    io_group.add_argument(
        "--card-list", type=str, default=None,
        help="Path to the card list, or '-' for stdin. One card per line: '[COUNT] NAME [SET]', e.g. '4 Lightning Bolt [2XM]'."
    )
    io_group.add_argument("--output-file", type=str, default=None, help="Base name for the output. Extension auto-added. Defaults to <card_list_name>, or MtgProxyOutput when reading stdin.")
    io_group.add_argument("--output-format", type=str, default="pdf", choices=["pdf", "png"], help="'pdf' for the print document, 'png' for preview pages.")

    # --- Card Data ---
    data_group = parser.add_argument_group('Card Data Options')
    data_group.add_argument("--card-data", type=str, default=DEFAULT_CARD_DATA_PATH, help="Local card data file (built by --update-card-data). If missing, cards are looked up through the Scryfall API.")
    data_group.add_argument("--update-card-data", action="store_true", help="Download Scryfall bulk data into --card-data and exit.")
    data_group.add_argument("--offline", action="store_true", help="Never query the Scryfall API for cards missing from the local data.")
    data_group.add_argument("--image-quality", type=str, default=ImageQuality.LARGE, choices=list(ImageQuality.ALL), help="Scryfall image version to print.")
    data_group.add_argument("--variant", type=str, action="append", help="Choose an alternate art for a card. Format: \"<Card Name>:<SET>[:<NUM>]\". Can be used multiple times.")
    data_group.add_argument("--list-variants", action="store_true", help="Print the available alternate arts for each card and exit without fetching images.")

    # --- Cut Line Options ---
    cut_line_group = parser.add_argument_group('Cut Line Options')
    cut_line_group.add_argument("--cut-lines", type=str, default=CutLineStyle.NONE, choices=list(CutLineStyle.ALL), help="Cut guide style.")
    cut_line_group.add_argument("--cut-line-color", type=str, default=DEFAULT_CUT_LINE_COLOR, help="Colour of cut lines (#rrggbb).")
    cut_line_group.add_argument("--cut-line-width", type=str, default=DEFAULT_CUT_LINE_WIDTH, help="Thickness of cut lines (e.g., '0.2mm', '0.5pt', '0.01in').")
    cut_line_group.add_argument("--cut-line-style", type=str, default="solid", choices=["solid", "dashed"], help="Stroke style of cut lines.")

    # --- General Options ---
    general_group = parser.add_argument_group('General Options')
    general_group.add_argument("--debug", action="store_true", help="Enable detailed debug messages.")

    args = parser.parse_args()

    # --- Card data sync mode ---
    if args.update_card_data:
        if not update_card_data(args.card_data, debug=args.debug): sys.exit(1)
        return

    # --- Mode Validation ---
    if not args.card_list:
        parser.error("--card-list is required (or use --update-card-data).")
    if args.card_list != "-" and not os.path.isfile(args.card_list):
        print(f"Error: Card list file '{args.card_list}' not found."); return
    try:
        cut_line_color = format_hex_color(parse_hex_color(args.cut_line_color))
        cut_line_width_mm = parse_dimension_to_mm(args.cut_line_width)
        variant_overrides = [parse_variant_override(v) for v in (args.variant or [])]
    except ValueError as e:
        parser.error(str(e))
    if cut_line_width_mm <= 0:
        parser.error("--cut-line-width must be greater than zero.")
    cut_settings = CutGuideSettings(args.cut_lines, cut_line_color, cut_line_width_mm, args.cut_line_style == "dashed")

    if args.card_list == "-":
        card_list_text = sys.stdin.read()
    else:
        with open(args.card_list, 'r', encoding='utf-8') as f: card_list_text = f.read()

    # --- Load card data ---
    print("--- Loading Card Data ---")
    card_index = load_card_index(args.card_data, debug=args.debug)

    client = ScryfallClient(rate_limiter=RateLimiter(), debug=args.debug)
    session = ProxySession(
        card_index=card_index,
        remote_lookup=None if args.offline else client.lookup_card,
        image_fetcher=client.fetch_image,
        quality=args.image_quality,
        progress_callback=print_progress,
        debug=args.debug
    )
    if card_index is None and args.offline:
        print("Warning: No local card data and --offline is set; no cards can be resolved.")

    # --- Resolve cards ---
    print("\n--- Resolving Cards ---")
    slots = session.resolve(card_list_text)
    if not slots:
        print("No valid card entries found. Exiting."); return

    for card_name, set_code, collector_number in variant_overrides:
        matched = False
        for slot_index, slot in enumerate(slots):
            if slot.selected is None or slot.selected.name.lower() != card_name.lower(): continue
            matched = True
            record = find_variant(slot, set_code, collector_number)
            if record is None:
                print(f"  Warning: No variant {set_code}{' ' + collector_number if collector_number else ''} for '{card_name}'. Keeping {slot.selected.set_code.upper()} {slot.selected.collector_number}.")
                continue
            session.select_variant(slot_index, record)
            if args.debug: print(f"DEBUG: Selected variant {record.set_code.upper()} {record.collector_number} for '{card_name}'")
        if not matched:
            print(f"  Warning: --variant '{card_name}' does not match any resolved card.")

    print_selection_manifest(slots)
    if args.list_variants:
        print_variant_listing(slots)
        print_diagnostics(session.diagnostics)
        return

    # --- Fetch images ---
    if any(slot.selected is not None for slot in slots):
        print("\n--- Fetching Images ---")
        session.acquire()
    result = session.result

    print_diagnostics(result.diagnostics)
    if args.card_list != "-":
        write_diagnostics_file(args.card_list, result.diagnostics)

    if result.is_empty:
        print("No images to print. Exiting."); return
    print(f"Prepared {len(result.images)} card image(s) from {result.resolved_count} of {len(result.slots)} entries.")

    # --- Generate output ---
    if args.output_file:
        base_output_filename = args.output_file
    elif args.card_list != "-":
        cl_bn = os.path.splitext(os.path.basename(args.card_list))[0]
        cl_dir = os.path.dirname(args.card_list)
        base_output_filename = os.path.join(cl_dir, cl_bn) if cl_dir else cl_bn
    else:
        base_output_filename = "MtgProxyOutput"

    pages = session.pages()
    if args.output_format == "pdf":
        create_pdf_sheets(pages, f"{base_output_filename}.pdf", cut_settings, debug=args.debug)
    elif args.output_format == "png":
        create_png_output(pages, f"{base_output_filename}.png", cut_settings, debug=args.debug)
    else:
        print(f"Error: Unknown output format '{args.output_format}'.")
