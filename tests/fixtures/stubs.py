"""Stand-ins for the outbound HTTP clients of the file pipeline."""
from typing import List, Optional

from telefile_api.errors import FetchError, ForwardFailed, PayloadTooLarge
from telefile_api.fetch import FetchedFile
from telefile_api.schemas import TelegramRef


class FakeTelegramClient:
    """Records every sendDocument call instead of talking to Telegram."""

    def __init__(self, fail_with: Optional[ForwardFailed] = None):
        self.fail_with = fail_with
        self.calls: List[dict] = []

    def send_document(self, bot_token, filename, content, mime="application/octet-stream", chat_id=None):
        self.calls.append({
            "bot_token": bot_token,
            "filename": filename,
            "content": content,
            "mime": mime,
            "chat_id": chat_id,
        })
        if self.fail_with is not None:
            raise self.fail_with
        return TelegramRef(
            external_file_id=f"tg_file_{len(self.calls)}",
            external_file_name=filename,
        )


class FakeFetcher:
    """Serves canned payloads keyed by URL."""

    def __init__(self, files: Optional[dict] = None):
        self.files = files or {}
        self.requested: List[str] = []

    def fetch(self, url: str, max_bytes: int) -> FetchedFile:
        self.requested.append(url)
        if url not in self.files:
            raise FetchError(f"Failed to fetch {url}: HTTP 404")
        fetched = self.files[url]
        if len(fetched.content) > max_bytes:
            raise PayloadTooLarge(len(fetched.content), max_bytes)
        return fetched
