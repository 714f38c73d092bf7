"""
Card processing logic for MtgProxyBuilder.
"""

from typing import Callable, List, NamedTuple, Optional, Tuple

import requests

from card_index import CardIndex, CardLookupError, CardRecord
from config import ImageQuality
from parsing_utils import ParsedEntry
from web_utils import build_image_url

# Remote lookup: (name, set_code) -> CardRecord, raising CardLookupError
CardLookup = Callable[[str, Optional[str]], CardRecord]

class DiagnosticKind:
    SET_MISMATCH = "set_mismatch"
    LOCAL_MISS = "local_miss"
    NOT_FOUND = "not_found"
    REMOTE_FAILURE = "remote_failure"
    IMAGE_FAILURE = "image_failure"

class Diagnostic(NamedTuple):
    kind: str
    message: str
    slot_index: Optional[int] = None

class CardSlot:
    """One resolved card list line: the chosen printing plus its alternate arts."""
    def __init__(self, name: str, quantity: int, set_code: Optional[str] = None):
        self.name = name
        self.quantity = quantity
        self.set_code = set_code
        self.selected: Optional[CardRecord] = None
        self.variants: List[CardRecord] = []
        self.warning: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.selected is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, CardSlot): return NotImplemented
        return (self.name, self.quantity, self.set_code, self.selected, self.variants, self.warning, self.error) == \
            (other.name, other.quantity, other.set_code, other.selected, other.variants, other.warning, other.error)

    def __repr__(self) -> str:
        chosen = f"{self.selected.set_code.upper()} {self.selected.collector_number}" if self.selected else None
        return f"CardSlot({self.quantity}x {self.name!r}, selected={chosen}, variants={len(self.variants)}, error={self.error!r})"

class ImageRequest(NamedTuple):
    url: str
    quality: str
    face: str
    card_name: str
    slot_index: int

def find_variants(selected: CardRecord, card_index: Optional[CardIndex]) -> List[CardRecord]:
    variants = card_index.variants_of(selected.oracle_id) if card_index is not None else []
    if not variants:
        return [selected]
    # A record resolved through the API may not be one of the indexed artworks
    if not any(v.image_id == selected.image_id for v in variants):
        variants.insert(0, selected)
    return variants

def resolve_entry(
    entry: ParsedEntry,
    card_index: Optional[CardIndex],
    remote_lookup: Optional[CardLookup],
    diagnostics: List[Diagnostic],
    slot_index: int = 0,
    debug: bool = False
) -> CardSlot:
    """
    Resolves one entry: local name+set, then local name only (with a set-mismatch
    warning), then the remote lookup. Failures are recorded on the slot, never raised.
    """
    slot = CardSlot(entry.name, entry.quantity, entry.set_code)
    log_line = f"{entry.quantity}x '{entry.name}'" + (f" [{entry.set_code}]" if entry.set_code else "")
    selected: Optional[CardRecord] = None

    if card_index is not None:
        selected = card_index.lookup_by_name(entry.name, entry.set_code)
        if selected is not None:
            if debug: print(f"DEBUG:   FOUND locally: {log_line} -> {selected.set_code.upper()} {selected.collector_number}")
        elif entry.set_code:
            selected = card_index.lookup_by_name(entry.name)
            if selected is not None:
                slot.warning = f"\"{entry.name}\" not found in set [{entry.set_code}], using {selected.set_code.upper()} instead"
                diagnostics.append(Diagnostic(DiagnosticKind.SET_MISMATCH, slot.warning, slot_index))
                print(f"  Warning: {slot.warning}")

    if selected is None:
        if remote_lookup is None:
            slot.error = f"Card not found: \"{entry.name}\"" + (f" [{entry.set_code}]" if entry.set_code else "")
            diagnostics.append(Diagnostic(DiagnosticKind.NOT_FOUND, slot.error, slot_index))
            print(f"  NOT FOUND: {log_line}")
            return slot
        if card_index is not None:
            message = f"\"{entry.name}\" not found in local data, trying API…"
            diagnostics.append(Diagnostic(DiagnosticKind.LOCAL_MISS, message, slot_index))
            if debug: print(f"DEBUG:   {message}")
        try:
            selected = remote_lookup(entry.name, entry.set_code)
        except CardLookupError as e:
            slot.error = e.message
            kind = DiagnosticKind.NOT_FOUND if e.status_code == 404 else DiagnosticKind.REMOTE_FAILURE
            diagnostics.append(Diagnostic(kind, slot.error, slot_index))
            print(f"  NOT FOUND (API): {log_line}: {slot.error}")
            return slot
        except requests.exceptions.RequestException as e:
            slot.error = f"Network error looking up \"{entry.name}\": {e}"
            diagnostics.append(Diagnostic(DiagnosticKind.REMOTE_FAILURE, slot.error, slot_index))
            print(f"  Warning: {slot.error}")
            return slot
        if debug: print(f"DEBUG:   FOUND via API: {log_line} -> {selected.set_code.upper()} {selected.collector_number}")

    slot.selected = selected
    slot.variants = find_variants(selected, card_index)
    return slot

def resolve_entries(
    entries: List[ParsedEntry],
    card_index: Optional[CardIndex],
    remote_lookup: Optional[CardLookup] = None,
    debug: bool = False
) -> Tuple[List[CardSlot], List[Diagnostic]]:
    """
    Resolves every entry independently, in order.
    Returns one slot per entry (failed ones included) and the collected diagnostics.
    """
    slots: List[CardSlot] = []
    diagnostics: List[Diagnostic] = []
    for slot_index, entry in enumerate(entries):
        slots.append(resolve_entry(entry, card_index, remote_lookup, diagnostics, slot_index, debug))
    return slots, diagnostics

def select_variant(slot: CardSlot, record: CardRecord) -> None:
    """Swaps the chosen printing for another one of the slot's own variants."""
    if record not in slot.variants:
        raise ValueError(f"{record.set_code.upper()} {record.collector_number} is not a variant of '{slot.name}'")
    slot.selected = record

def find_variant(slot: CardSlot, set_code: str, collector_number: Optional[str] = None) -> Optional[CardRecord]:
    for record in slot.variants:
        if record.set_code.lower() != set_code.lower():
            continue
        if collector_number is None or record.collector_number.lower() == collector_number.lower():
            return record
    return None

def expand_slots(slots: List[CardSlot], quality: str = ImageQuality.LARGE) -> List[ImageRequest]:
    """
    Flattens slots into image requests. Copies of a card are contiguous and a
    double-faced card always emits front before back within each copy.
    """
    requests_out: List[ImageRequest] = []
    for slot_index, slot in enumerate(slots):
        record = slot.selected
        if record is None:
            continue
        faces = ("front", "back") if record.is_double_faced else ("front",)
        face_requests = [
            ImageRequest(build_image_url(record.image_id, quality, face), quality, face, record.name, slot_index)
            for face in faces
        ]
        for _ in range(slot.quantity):
            requests_out.extend(face_requests)
    return requests_out
