"""
Session state for MtgProxyBuilder.

A ProxySession owns everything that changes during a run: the resolved slots,
the acquired images and the diagnostic log. Each stage gets what it needs from
the session explicitly.
"""

from typing import Dict, List, NamedTuple, Optional

from PIL import Image

from card_index import CardIndex, CardRecord
from card_processing import (
    CardLookup, CardSlot, Diagnostic, DiagnosticKind, ImageRequest, expand_slots, resolve_entries,
    select_variant,
)
from config import ImageQuality
from image_handler import AcquiredImage, ImageFetcher, ProgressCallback, acquire_images
from page_layout import Page, paginate
from parsing_utils import parse_card_list

class BatchResult(NamedTuple):
    slots: List[CardSlot]
    images: List[AcquiredImage]
    diagnostics: List[Diagnostic]

    @property
    def is_empty(self) -> bool:
        return not self.images

    @property
    def resolved_count(self) -> int:
        return sum(1 for slot in self.slots if slot.selected is not None)

class ProxySession:
    def __init__(
        self,
        card_index: Optional[CardIndex] = None,
        remote_lookup: Optional[CardLookup] = None,
        image_fetcher: Optional[ImageFetcher] = None,
        quality: str = ImageQuality.LARGE,
        progress_callback: Optional[ProgressCallback] = None,
        debug: bool = False
    ):
        if quality not in ImageQuality.ALL:
            raise ValueError(f"Invalid image quality: '{quality}'. Supported: {', '.join(ImageQuality.ALL)}")
        self.card_index = card_index
        self.remote_lookup = remote_lookup
        self.image_fetcher = image_fetcher
        self.quality = quality
        self.progress_callback = progress_callback
        self.debug = debug
        self.slots: List[CardSlot] = []
        self.images: List[AcquiredImage] = []
        self.diagnostics: List[Diagnostic] = []
        self._image_cache: Dict[str, Image.Image] = {}

    @property
    def result(self) -> BatchResult:
        return BatchResult(list(self.slots), list(self.images), list(self.diagnostics))

    def clear(self):
        self.slots = []
        self.images = []
        self.diagnostics = []
        self._image_cache.clear()

    def resolve(self, text: str) -> List[CardSlot]:
        """Parses and resolves a card list, replacing any previous run."""
        self.clear()
        entries = parse_card_list(text, self.debug)
        if self.debug: print(f"DEBUG: Parsed {len(entries)} card list entries")
        self.slots, self.diagnostics = resolve_entries(entries, self.card_index, self.remote_lookup, self.debug)
        return self.slots

    def image_requests(self) -> List[ImageRequest]:
        return expand_slots(self.slots, self.quality)

    def acquire(self) -> List[AcquiredImage]:
        """(Re)builds the flat image sequence from the current slot selections."""
        if self.image_fetcher is None:
            raise RuntimeError("No image fetcher configured for this session")
        # Image failures from an earlier acquire are replaced by this pass's
        self.diagnostics = [d for d in self.diagnostics if d.kind != DiagnosticKind.IMAGE_FAILURE]
        self.images = acquire_images(
            self.image_requests(), self.image_fetcher, self.diagnostics,
            cache=self._image_cache, progress_callback=self.progress_callback, debug=self.debug
        )
        return self.images

    def run(self, text: str) -> BatchResult:
        """Full batch: parse, resolve, expand, fetch. Never raises for per-card failures."""
        self.resolve(text)
        if any(slot.selected is not None for slot in self.slots):
            self.acquire()
        return self.result

    def select_variant(self, slot_index: int, record: CardRecord):
        """Changes one slot's printing. Call acquire() afterwards to refresh images."""
        select_variant(self.slots[slot_index], record)

    def pages(self) -> List[Page]:
        return paginate(self.images)
