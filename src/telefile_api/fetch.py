"""Download files from a URL for the upload pipeline."""
import logging
import mimetypes
import posixpath
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import FetchError, PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "download"
DEFAULT_MIME = "application/octet-stream"
CHUNK_SIZE = 64 * 1024


@dataclass
class FetchedFile:
    """A payload resolved from a remote URL."""
    filename: str
    content: bytes
    mime: str


def filename_from_url(url: str) -> str:
    """Last segment of the URL path, or a generic name when there is none."""
    name = posixpath.basename(unquote(urlparse(url).path))
    return name or DEFAULT_FILENAME


class RemoteFetcher:
    """Bounded HTTP download with a fixed deadline."""

    def __init__(self, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str, max_bytes: int) -> FetchedFile:
        """
        Download `url`, refusing payloads larger than `max_bytes`.

        :raises ValidationError: the URL is not http(s)
        :raises FetchError: network failure or a non-success status
        :raises PayloadTooLarge: the body exceeds `max_bytes`
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"Invalid URL: {url}")

        logger.info(f"Fetching remote file: {url}")
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                if not response.ok:
                    raise FetchError(f"Failed to fetch {url}: HTTP {response.status_code}")

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise PayloadTooLarge(int(declared), max_bytes)

                content = self._read_bounded(response, max_bytes)
                header_mime = response.headers.get("Content-Type", "")
        except requests.RequestException as e:
            logger.error(f"Error fetching {url}: {e}")
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        filename = filename_from_url(url)
        mime = header_mime.split(";")[0].strip() or mimetypes.guess_type(filename)[0] or DEFAULT_MIME
        logger.info(f"Fetched {len(content)} bytes from {url} as {mime}")
        return FetchedFile(filename=filename, content=content, mime=mime)

    @staticmethod
    def _read_bounded(response: requests.Response, max_bytes: int) -> bytes:
        buffer = bytearray()
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            buffer.extend(chunk)
            if len(buffer) > max_bytes:
                raise PayloadTooLarge(len(buffer), max_bytes)
        return bytes(buffer)
