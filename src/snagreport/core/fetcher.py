"""Fetch remote photos so they can be embedded in a report.

Photo fetching is best-effort: a broken link, a non-2xx response, a
timeout or a payload that does not decode as an image all produce an
explicit non-embedded result instead of an exception, so a single bad
photo can never abort an export.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Protocol

import httpx
from reportlab.lib.utils import ImageReader

from .models import PhotoState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_FETCH_TIMEOUT = 10.0


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhotoFetchResult:
    """Outcome of a single photo fetch.

    ``image`` is set only when ``state`` is :attr:`PhotoState.EMBEDDED`.
    """

    state: PhotoState
    image: Optional[ImageReader] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.state is PhotoState.EMBEDDED and self.image is not None

    @classmethod
    def unavailable(cls, detail: str) -> PhotoFetchResult:
        return cls(state=PhotoState.UNAVAILABLE, detail=detail)

    @classmethod
    def error(cls, detail: str) -> PhotoFetchResult:
        return cls(state=PhotoState.ERROR, detail=detail)


class ImageFetcher(Protocol):
    """Anything that can turn a photo URL into a :class:`PhotoFetchResult`."""

    def fetch(self, url: str) -> PhotoFetchResult: ...


def decode_image(data: bytes) -> ImageReader:
    """Decode raw bytes into an embeddable image.

    Raises if the payload is not a readable raster image.  The pixel
    data is decoded in full here so a truncated payload fails now rather
    than when it is drawn.
    """
    reader = ImageReader(BytesIO(data))
    width, height = reader.getSize()
    if width <= 0 or height <= 0:
        raise ValueError(f"image has invalid size {width}x{height}")
    reader.getRGBData()
    return reader


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

class PhotoFetcher:
    """Downloads photos over HTTP(S) with a bounded per-request timeout.

    Each call performs at most one request; there is no retry and no
    caching between calls.
    """

    def __init__(self, timeout: float = DEFAULT_FETCH_TIMEOUT) -> None:
        self.timeout = timeout

    def fetch(self, url: str) -> PhotoFetchResult:
        """Fetch *url* and return the decoded image or a failure state."""
        if not url or not url.strip():
            return PhotoFetchResult.unavailable("empty photo URL")

        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                resp = client.get(url)
        except Exception as exc:
            logger.warning("Failed to fetch photo %s: %s", url, exc)
            return PhotoFetchResult.error(str(exc) or type(exc).__name__)

        if not 200 <= resp.status_code < 300:
            logger.warning("Photo %s returned HTTP %d", url, resp.status_code)
            return PhotoFetchResult.unavailable(f"HTTP {resp.status_code}")

        try:
            image = decode_image(resp.content)
        except Exception as exc:
            logger.warning("Photo %s could not be decoded: %s", url, exc)
            return PhotoFetchResult.unavailable("undecodable image")

        logger.debug("Fetched photo %s (%d bytes)", url, len(resp.content))
        return PhotoFetchResult(state=PhotoState.EMBEDDED, image=image)
