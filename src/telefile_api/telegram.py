"""Telegram Bot API client used to forward uploaded files."""
import logging
from typing import Optional

import requests

from .errors import ForwardFailed
from .schemas import TelegramRef

logger = logging.getLogger(__name__)


class TelegramClient:
    """HTTP client for the `sendDocument` method of the Telegram Bot API."""

    def __init__(
        self,
        api_base: str = "https://api.telegram.org",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            api_base: Base URL of the Bot API
            timeout: Request timeout in seconds
            session: Optional requests session, created if not provided
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_document(
        self,
        bot_token: str,
        filename: str,
        content: bytes,
        mime: str = "application/octet-stream",
        chat_id: Optional[str] = None,
    ) -> TelegramRef:
        """
        Upload `content` as a document and return the reference Telegram assigned.

        :raises ForwardFailed: on network errors, non-success responses, or a
            response without `result.document.file_id`.
        """
        url = f"{self.api_base}/bot{bot_token}/sendDocument"
        data = {"chat_id": chat_id} if chat_id else {}
        logger.info(f"Forwarding '{filename}' ({len(content)} bytes) to Telegram")
        try:
            response = self.session.post(
                url,
                data=data,
                files={"document": (filename, content, mime)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # The URL embeds the bot token, so only the exception type is reported
            logger.error(f"Telegram request failed: {type(e).__name__}")
            raise ForwardFailed(f"Telegram request failed: {type(e).__name__}") from None

        if not response.ok:
            logger.error(f"Telegram returned {response.status_code} for '{filename}'")
            raise ForwardFailed(
                f"Telegram API error {response.status_code}: {response.text[:500]}",
                upstream_status=response.status_code,
            )

        return self._parse_document(response)

    @staticmethod
    def _parse_document(response: requests.Response) -> TelegramRef:
        try:
            payload = response.json()
        except ValueError:
            raise ForwardFailed("Malformed Telegram response: body is not JSON",
                                upstream_status=response.status_code) from None

        if not isinstance(payload, dict) or not payload.get("ok"):
            raise ForwardFailed("Malformed Telegram response: 'ok' is not true",
                                upstream_status=response.status_code)

        result = payload.get("result")
        document = result.get("document") if isinstance(result, dict) else None
        if not isinstance(document, dict) or not document.get("file_id"):
            raise ForwardFailed("Malformed Telegram response: missing result.document.file_id",
                                upstream_status=response.status_code)

        return TelegramRef(
            external_file_id=document["file_id"],
            external_file_name=document.get("file_name"),
        )
