"""
File ingestion pipeline.

Upload (inline bytes or a fetched URL), download reconstruction from the
stored base64 content, and the idempotent forward to Telegram.

Forward state per file is Unforwarded -> Forwarding -> Forwarded. Only the
marker of the last state is persisted, so a crash mid-call leaves the file
unforwarded and the forward can simply be retried.
"""

import base64
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from entity_store import IndexedEntityStore, StoreError

from .entities import FileEntity, get_app_settings, now_ms
from .errors import ForwardFailed, NoContent, NotConfigured, NotFound, PayloadTooLarge, ValidationError
from .fetch import DEFAULT_MIME, RemoteFetcher
from .schemas import AppSettings, FileRecord
from .telegram import TelegramClient
from .utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 2 * 1024 * 1024
DEFAULT_UPLOAD_NAME = "upload"


@dataclass
class DownloadedFile:
    content: bytes
    mime: str
    filename: str


def normalize_folder_id(folder_id: Optional[str]) -> Optional[str]:
    """Form posts send missing folders as '', 'null' or 'undefined'; all mean the root."""
    if folder_id is None:
        return None
    folder_id = folder_id.strip()
    if folder_id in ("", "null", "undefined"):
        return None
    return folder_id


class FilePipeline:
    """Orchestrates uploads, downloads and forwards of file entities"""

    def __init__(
        self,
        store: IndexedEntityStore,
        telegram: TelegramClient,
        fetcher: RemoteFetcher,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
    ):
        self.store = store
        self.telegram = telegram
        self.fetcher = fetcher
        self.max_upload_bytes = max_upload_bytes

    @log_execution_time
    def upload(
        self,
        content: Optional[bytes] = None,
        filename: Optional[str] = None,
        mime: Optional[str] = None,
        url: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> FileRecord:
        """
        Store a new file and, when a bot token is configured, forward it.

        Inline `content` wins over `url`. Validation happens before anything
        is written. A failed forward is logged and the upload still succeeds;
        the missing marker on the returned record is the only signal.
        """
        if content is None:
            if not url:
                raise ValidationError("File or URL is required")
            fetched = self.fetcher.fetch(url, self.max_upload_bytes)
            content = fetched.content
            filename = filename or fetched.filename
            mime = mime or fetched.mime

        if len(content) > self.max_upload_bytes:
            raise PayloadTooLarge(len(content), self.max_upload_bytes)

        record = FileRecord(
            id=str(uuid.uuid4()),
            name=filename or DEFAULT_UPLOAD_NAME,
            folder_id=normalize_folder_id(folder_id),
            size=len(content),
            mime=mime or DEFAULT_MIME,
            created_at=now_ms(),
        )
        entity = FileEntity(self.store, record.id)
        entity.save(record)
        state = entity.save_content(base64.b64encode(content).decode("ascii"))
        logger.info(f"Uploaded file {record.id} '{record.name}' ({record.size} bytes, {record.mime})")

        settings = get_app_settings(self.store)
        if settings.bot_token:
            # Forwarding is best effort; the stored upload stands either way
            try:
                state = self._send(entity, state, content, settings)
            except (ForwardFailed, StoreError) as e:
                logger.warning(f"Upload of {record.id} kept without forward: {type(e).__name__}: {e}")
        return state

    def download(self, file_id: str) -> DownloadedFile:
        entity = FileEntity(self.store, file_id)
        state = entity.get_state()
        if state is None:
            raise NotFound("File not found")
        content = entity.get_content(state)
        if content is None:
            raise NoContent("File has no stored content")
        return DownloadedFile(
            content=content,
            mime=state.mime or DEFAULT_MIME,
            filename=state.name or file_id,
        )

    @log_execution_time
    def forward(self, file_id: str) -> FileRecord:
        """Push a file to Telegram once; later calls return the stored marker."""
        entity = FileEntity(self.store, file_id)
        state = entity.get_state()
        if state is None:
            raise NotFound("File not found")

        settings = get_app_settings(self.store)
        if not settings.bot_token:
            raise NotConfigured("Telegram bot token is not configured")

        if state.telegram is not None:
            logger.info(f"File {file_id} already forwarded as {state.telegram.external_file_id}")
            return state

        content = entity.get_content(state)
        if content is None:
            raise NoContent("File has no stored content to forward")
        return self._send(entity, state, content, settings)

    def _send(self, entity: FileEntity, state: FileRecord, content: bytes, settings: AppSettings) -> FileRecord:
        ref = self.telegram.send_document(
            bot_token=settings.bot_token,
            filename=state.name,
            content=content,
            mime=state.mime or DEFAULT_MIME,
            chat_id=settings.channel_id,
        )
        forwarded = entity.mark_as_forwarded(ref)
        logger.info(f"Forwarded file {entity.id} as {forwarded.telegram.external_file_id}")
        return forwarded
