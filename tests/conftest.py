import io
from typing import Any, Dict, List, Optional

import pytest
import requests
from PIL import Image

from card_index import CardIndex, CardLookupError, CardRecord


BOLT_2XM = CardRecord("Lightning Bolt", "a1b2c3d4", "2xm", "117", "oracle-bolt")
BOLT_LEB = CardRecord("Lightning Bolt", "b2c3d4e5", "leb", "161", "oracle-bolt")
BOLT_CLB = CardRecord("Lightning Bolt", "c3d4e5f6", "clb", "187", "oracle-bolt")
DELVER = CardRecord("Delver of Secrets // Insectile Aberration", "d4e5f6a7", "isd", "51", "oracle-delver", True)
SOL_RING = CardRecord("Sol Ring", "e5f6a7b8", "cmd", "261", "oracle-sol")


class FakeClock:
    """Deterministic clock; sleep() advances time instead of blocking."""
    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, content: bytes = b""):
        self.status_code = status_code
        self._json = json_data
        self.content = content

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stands in for requests.Session; responses are looked up by URL."""
    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return FakeResponse(404, {"details": f"No fake response for {url}"})
        return response


class FakeLookup:
    """Remote lookup stub keyed by lowercased card name."""
    def __init__(self, cards: Optional[Dict[str, CardRecord]] = None, message: Optional[str] = None):
        self.cards = cards or {}
        self.message = message
        self.calls: List[tuple] = []

    def __call__(self, name: str, set_code: Optional[str] = None) -> CardRecord:
        self.calls.append((name, set_code))
        record = self.cards.get(name.lower())
        if record is None:
            raise CardLookupError(self.message or f"Card not found: \"{name}\"", status_code=404)
        return record


def make_image_bytes(color=(200, 30, 30), size=(63, 88), fmt="JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_records() -> List[CardRecord]:
    """Records in dataset order; the first Lightning Bolt is the preferred printing."""
    return [BOLT_2XM, BOLT_LEB, DELVER, SOL_RING, BOLT_CLB]


@pytest.fixture
def card_index(sample_records) -> CardIndex:
    return CardIndex(sample_records)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def image_fetcher():
    """Fetcher returning a small JPEG for any URL, recording each call."""
    calls: List[str] = []
    def fetch(url: str) -> bytes:
        calls.append(url)
        return make_image_bytes()
    fetch.calls = calls
    return fetch
