"""
Image handling for MtgProxyBuilder.
"""

import io
from typing import Callable, Dict, List, NamedTuple, Optional

import requests
from PIL import Image, UnidentifiedImageError

from card_processing import Diagnostic, DiagnosticKind, ImageRequest

# url -> encoded image bytes
ImageFetcher = Callable[[str], bytes]
ProgressCallback = Callable[[int, int], None]

class AcquiredImage(NamedTuple):
    request: ImageRequest
    image: Image.Image

def decode_image(data: bytes) -> Image.Image:
    """Decodes encoded image bytes into an RGB image."""
    img = Image.open(io.BytesIO(data))
    img.load()
    if img.mode != 'RGB':
        img = img.convert('RGB')
    return img

def acquire_images(
    image_requests: List[ImageRequest],
    fetch: ImageFetcher,
    diagnostics: List[Diagnostic],
    cache: Optional[Dict[str, Image.Image]] = None,
    progress_callback: Optional[ProgressCallback] = None,
    debug: bool = False
) -> List[AcquiredImage]:
    """
    Fetches and decodes every request strictly in order, one at a time.
    A URL is downloaded once; later copies reuse the decoded image. A failed
    request is recorded and skipped.
    """
    if cache is None:
        cache = {}
    acquired: List[AcquiredImage] = []
    failed_urls: Dict[str, str] = {}
    total = len(image_requests)
    for done, image_request in enumerate(image_requests, 1):
        url = image_request.url
        if url in cache:
            acquired.append(AcquiredImage(image_request, cache[url]))
        elif url in failed_urls:
            # Already reported for an earlier copy of this face
            if debug: print(f"DEBUG: Skipping copy of failed image {url}")
        else:
            try:
                img = decode_image(fetch(url))
                cache[url] = img
                acquired.append(AcquiredImage(image_request, img))
            except (requests.exceptions.RequestException, UnidentifiedImageError, OSError) as e:
                message = f"Image load failed for \"{image_request.card_name}\" ({image_request.face}): {e}"
                failed_urls[url] = message
                diagnostics.append(Diagnostic(DiagnosticKind.IMAGE_FAILURE, message, image_request.slot_index))
                print(f"  Warning: {message}")
        if progress_callback:
            progress_callback(done, total)
    return acquired

def print_progress(done: int, total: int) -> None:
    end = "\n" if done == total else "\r"
    print(f"  Fetched {done}/{total}…", end=end, flush=True)
