"""
Card data sync for MtgProxyBuilder.

Builds the local card data file from Scryfall's "unique_artwork" bulk export,
keeping only the fields card resolution needs.
"""

import json
import os
import requests
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config import (
    BULK_DATA_TYPE, BULK_DOWNLOAD_TIMEOUT_SECONDS, DEFAULT_CARD_DATA_PATH, DOUBLE_FACED_LAYOUTS,
    SCRYFALL_BULK_DATA_URL,
)
from web_utils import new_http_session


def extract_card(card: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Strip a Scryfall card object down to {n, id, s, cn, o[, d]}.

    Args:
        card: A card object from the bulk export.

    Returns:
        The compact entry, or None if the card has no usable images.
    """
    is_double_faced = card.get("layout") in DOUBLE_FACED_LAYOUTS
    if is_double_faced:
        has_images = any(face.get("image_uris") for face in card.get("card_faces") or [])
    else:
        has_images = bool(card.get("image_uris"))
    if not has_images or not card.get("id") or not card.get("name"):
        return None

    entry = {
        "n": card["name"],
        "id": card["id"],
        "s": card.get("set", ""),
        "cn": card.get("collector_number", ""),
        "o": card.get("oracle_id") or ((card.get("card_faces") or [{}])[0].get("oracle_id", "")),
    }
    if is_double_faced:
        entry["d"] = 1
    return entry


def update_card_data(
    json_path: Optional[str] = None,
    session: Optional[requests.Session] = None,
    debug: bool = False
) -> bool:
    """
    Fetch the latest bulk card data from Scryfall and save the compact card file
    plus a meta.json next to it.

    Args:
        json_path: Path to save cards.json. If None, uses data/cards.json.
        session: HTTP session to use. If None, a new one is created.
        debug: Enable debug output.

    Returns:
        True if successful, False otherwise.
    """
    if json_path is None:
        json_path = DEFAULT_CARD_DATA_PATH
    meta_path = os.path.join(os.path.dirname(json_path), "meta.json")
    if session is None:
        session = new_http_session()

    print(f"Fetching bulk data manifest: {SCRYFALL_BULK_DATA_URL}")

    try:
        response = session.get(SCRYFALL_BULK_DATA_URL, timeout=30)
        response.raise_for_status()
        manifest = response.json()

        bulk_entry = next((d for d in manifest.get("data", []) if d.get("type") == BULK_DATA_TYPE), None)
        if not bulk_entry:
            print(f"Error: Could not find \"{BULK_DATA_TYPE}\" in bulk data manifest")
            return False

        print(f"Found {BULK_DATA_TYPE} (updated {bulk_entry.get('updated_at')})")
        if bulk_entry.get("size"):
            print(f"  Size: {bulk_entry['size'] / 1024 / 1024:.1f} MB")
        print(f"  Downloading from: {bulk_entry['download_uri']}")
        print("  This may take a few minutes…")

        response = session.get(bulk_entry["download_uri"], timeout=BULK_DOWNLOAD_TIMEOUT_SECONDS)
        response.raise_for_status()
        all_cards = response.json()

    except requests.exceptions.RequestException as e:
        print(f"Error: Failed to fetch card data from Scryfall API: {e}")
        return False
    except (ValueError, KeyError) as e:
        print(f"Error: Unexpected response from Scryfall API: {e}")
        return False

    cards: List[Dict[str, Any]] = []
    for card in all_cards:
        entry = extract_card(card) if isinstance(card, dict) else None
        if entry:
            cards.append(entry)
    print(f"  Parsed {len(all_cards)} cards, kept {len(cards)} with images")

    if not cards:
        print("Error: No cards with images found in bulk data")
        return False

    meta = {
        "updated": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "source": BULK_DATA_TYPE,
        "sourceUpdated": bulk_entry.get("updated_at"),
        "count": len(cards),
    }

    try:
        os.makedirs(os.path.dirname(os.path.abspath(json_path)), exist_ok=True)
        # Minified, the file is loaded on every run
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(cards, f, ensure_ascii=False, separators=(",", ":"))
        with open(meta_path, 'w', encoding='utf-8') as f:
            json.dump(meta, f, indent=2, ensure_ascii=False)
    except (IOError, TypeError) as e:
        print(f"Error: Failed to write card data to {json_path}: {e}")
        return False

    print(f"Successfully updated card data: {json_path} ({len(cards)} entries)")
    if debug:
        print(f"DEBUG: Wrote {meta_path}")
    return True
