"""
Card index for MtgProxyBuilder.

Holds the records loaded from the local card data file and the adapters that
turn external card shapes (the compact sync format, Scryfall API objects) into
CardRecord.
"""

import json
import os
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from config import DEFAULT_CARD_DATA_PATH, DEFAULT_CARD_META_PATH


class CardLookupError(Exception):
    """A card could not be resolved by the remote lookup."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CardRecord(NamedTuple):
    name: str
    image_id: str
    set_code: str
    collector_number: str
    oracle_id: str
    is_double_faced: bool = False


class CardIndex:
    """Name and oracle-id lookups over an immutable set of card records."""
    def __init__(self, records: Iterable[CardRecord], updated: Optional[str] = None):
        self.by_name: Dict[str, List[CardRecord]] = defaultdict(list)
        self.by_oracle_id: Dict[str, List[CardRecord]] = defaultdict(list)
        self.updated = updated
        self.record_count = 0
        for record in records:
            self.by_name[record.name.lower()].append(record)
            if record.oracle_id:
                self.by_oracle_id[record.oracle_id].append(record)
            self.record_count += 1

    def __len__(self) -> int:
        return self.record_count

    def lookup_by_name(self, name: str, set_code: Optional[str] = None) -> Optional[CardRecord]:
        """
        Exact, case-insensitive name lookup. With a set code, only a record from
        that set is returned; there is no fallback to another set here.
        """
        matches = self.by_name.get(name.lower())
        if not matches:
            return None
        if set_code:
            set_lower = set_code.lower()
            for record in matches:
                if record.set_code.lower() == set_lower:
                    return record
            return None
        # First entry is the preferred printing
        return matches[0]

    def variants_of(self, oracle_id: Optional[str]) -> List[CardRecord]:
        if not oracle_id:
            return []
        return list(self.by_oracle_id.get(oracle_id, []))

    def status_text(self) -> str:
        if self.updated:
            try:
                date = datetime.fromisoformat(self.updated.replace("Z", "+00:00")).date().isoformat()
            except ValueError:
                date = self.updated
            return f"{self.record_count:,} cards · Updated {date}"
        return f"{self.record_count:,} cards loaded"


def is_valid_image_id(image_id: Any) -> bool:
    # The CDN path uses the first two characters as directories
    return isinstance(image_id, str) and len(image_id) >= 2


def card_record_from_dataset(entry: Dict[str, Any]) -> Optional[CardRecord]:
    """
    Accepts both the compact sync format {n, id, s, cn, o, d} and the long form
    {name, imageId, setCode, collectorNumber, oracleId, doubleFaced}.
    """
    name = entry.get("n", entry.get("name"))
    image_id = entry.get("id", entry.get("imageId"))
    oracle_id = entry.get("o", entry.get("oracleId"))
    if not isinstance(name, str) or not name or not is_valid_image_id(image_id):
        return None
    return CardRecord(
        name=name,
        image_id=image_id,
        set_code=str(entry.get("s", entry.get("setCode")) or ""),
        collector_number=str(entry.get("cn", entry.get("collectorNumber")) or ""),
        oracle_id=oracle_id if isinstance(oracle_id, str) else "",
        is_double_faced=bool(entry.get("d", entry.get("doubleFaced", False))),
    )


def card_record_from_api(card: Dict[str, Any]) -> CardRecord:
    """Normalizes a Scryfall card object. Raises CardLookupError if it has no images."""
    faces = card.get("card_faces") or []
    faces_with_images = [face for face in faces if face.get("image_uris")]
    if not card.get("image_uris") and not faces_with_images:
        raise CardLookupError(f"No images available for \"{card.get('name', 'unknown card')}\"")
    if not is_valid_image_id(card.get("id")):
        raise CardLookupError(f"Malformed card data for \"{card.get('name', 'unknown card')}\"")
    oracle_id = card.get("oracle_id")
    if not oracle_id and faces:
        oracle_id = faces[0].get("oracle_id")
    return CardRecord(
        name=card.get("name", ""),
        image_id=card["id"],
        set_code=card.get("set", ""),
        collector_number=str(card.get("collector_number", "")),
        oracle_id=oracle_id or "",
        # Per-face images only exist on double-faced layouts
        is_double_faced=not card.get("image_uris") and bool(faces_with_images),
    )


def load_card_index(
    cards_path: Optional[str] = None,
    meta_path: Optional[str] = None,
    debug: bool = False
) -> Optional[CardIndex]:
    """
    Load the local card data file into a CardIndex.

    Args:
        cards_path: Path to cards.json. If None, uses data/cards.json.
        meta_path: Path to meta.json. If None, looks next to cards_path.
        debug: Enable debug output.

    Returns:
        The CardIndex, or None if the data is missing or unreadable. Resolution
        then uses the Scryfall API only.
    """
    if cards_path is None:
        cards_path = DEFAULT_CARD_DATA_PATH
    if meta_path is None:
        meta_path = os.path.join(os.path.dirname(cards_path), os.path.basename(DEFAULT_CARD_META_PATH))

    if not os.path.exists(cards_path):
        print(f"Warning: Card data not found at {cards_path}, using API fallback")
        return None

    try:
        with open(cards_path, 'r', encoding='utf-8') as f:
            raw_cards = json.load(f)
        if not isinstance(raw_cards, list):
            raise ValueError("expected a JSON array of cards")
    except (json.JSONDecodeError, IOError, ValueError) as e:
        print(f"Warning: Failed to load card data from {cards_path}: {e}. Using API fallback")
        return None

    records = []
    for raw in raw_cards:
        record = card_record_from_dataset(raw) if isinstance(raw, dict) else None
        if record is None:
            if debug: print(f"DEBUG: Skipping card data entry without name or id: {raw!r}")
            continue
        records.append(record)

    # meta.json is optional
    updated = None
    if os.path.exists(meta_path):
        try:
            with open(meta_path, 'r', encoding='utf-8') as f:
                updated = json.load(f).get("updated")
            if not isinstance(updated, str):
                updated = None
        except (json.JSONDecodeError, IOError, AttributeError) as e:
            if debug: print(f"DEBUG: Ignoring unreadable card meta {meta_path}: {e}")

    card_index = CardIndex(records, updated=updated)
    print(card_index.status_text())
    return card_index
