"""
Web utilities for MtgProxyBuilder.
"""

import time
from typing import Any, Callable, Dict, Optional

import requests

from card_index import CardLookupError, CardRecord, card_record_from_api
from config import (
    API_TIMEOUT_SECONDS, HTTP_USER_AGENT, IMAGE_TIMEOUT_SECONDS, REQUEST_INTERVAL_SECONDS,
    SCRYFALL_API_URL, SCRYFALL_IMAGE_CDN, ImageQuality,
)

class RateLimiter:
    """
    Sequential pacing: every call waits until at least min_interval seconds have
    passed since the previous call started, or since the limiter was created for
    the first call. Clock and sleep are injectable.
    """
    def __init__(
        self,
        min_interval: float = REQUEST_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.min_interval = min_interval
        self.clock = clock
        self.sleep = sleep
        self.last_request_time: float = clock()

    def wait(self) -> float:
        """Blocks until the next call is allowed. Returns the time slept."""
        elapsed = self.clock() - self.last_request_time
        wait_time = self.min_interval - elapsed
        if wait_time > 0:
            self.sleep(wait_time)
        else:
            wait_time = 0.0
        self.last_request_time = self.clock()
        return wait_time

    def call(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        self.wait()
        return fn(*args, **kwargs)

def build_image_url(image_id: str, quality: str = ImageQuality.LARGE, face: str = "front") -> str:
    """
    Reconstructs a Scryfall CDN image URL from a card id.
    Pattern: https://cards.scryfall.io/{quality}/{face}/{id[0]}/{id[1]}/{id}.{ext}
    """
    ext = "png" if quality == ImageQuality.PNG else "jpg"
    return f"{SCRYFALL_IMAGE_CDN}/{quality}/{face}/{image_id[0]}/{image_id[1]}/{image_id}.{ext}"

def new_http_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({'User-Agent': HTTP_USER_AGENT, 'Accept': 'application/json;q=0.9,*/*;q=0.8'})
    return session

class ScryfallClient:
    """Remote card lookup and image download, paced by a shared RateLimiter."""
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        api_url: str = SCRYFALL_API_URL,
        debug: bool = False
    ):
        self.session = session if session is not None else new_http_session()
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.api_url = api_url.rstrip('/')
        self.debug = debug

    def lookup_card(self, name: str, set_code: Optional[str] = None) -> CardRecord:
        """
        Fuzzy-name lookup (optionally restricted to a set).
        Raises CardLookupError with Scryfall's message when the card can't be resolved.
        """
        params: Dict[str, str] = {'fuzzy': name}
        if set_code:
            params['set'] = set_code.lower()
        url = f"{self.api_url}/cards/named"
        if self.debug: print(f"DEBUG: Scryfall lookup {url} {params}")
        fallback_message = f"Card not found: \"{name}\"" + (f" [{set_code}]" if set_code else "")
        try:
            r = self.rate_limiter.call(self.session.get, url, params=params, timeout=API_TIMEOUT_SECONDS)
        except requests.exceptions.RequestException as e:
            raise CardLookupError(f"Network error looking up \"{name}\": {e}")
        if r.status_code != 200:
            details = None
            try:
                details = r.json().get('details')
            except ValueError:
                pass
            raise CardLookupError(details or fallback_message, status_code=r.status_code)
        try:
            card_json = r.json()
        except ValueError:
            raise CardLookupError(fallback_message, status_code=r.status_code)
        return card_record_from_api(card_json)

    def fetch_image(self, url: str) -> bytes:
        """Downloads raw image bytes. Raises requests.RequestException on failure."""
        if self.debug: print(f"DEBUG: Downloading image from {url}")
        r = self.rate_limiter.call(self.session.get, url, timeout=IMAGE_TIMEOUT_SECONDS)
        r.raise_for_status()
        return r.content
