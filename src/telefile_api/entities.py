"""
TeleFile entities: Folder, File and the AppSettings singleton.

Each kind plugs its pydantic model and demo data into the generic entity store.
"""

import base64
import binascii
import logging
import time
from typing import List, Optional

from entity_store import AlreadyExists, EntityKind, IndexedEntityStore

from .errors import NoContent
from .schemas import (
    SETTINGS_ID,
    AppSettings,
    AppSettingsPatch,
    FilePatch,
    FileRecord,
    Folder,
    TelegramRef,
)

logger = logging.getLogger(__name__)

DAY_MS = 86_400_000


def now_ms() -> int:
    return int(time.time() * 1000)


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class FolderKind(EntityKind[Folder]):
    entity_name = "folder"
    index_name = "folders"
    model = Folder

    def seed_data(self) -> List[Folder]:
        now = now_ms()
        return [
            Folder(id="f1", name="Documents", created_at=now - DAY_MS),
            Folder(id="f2", name="Images", created_at=now - 2 * DAY_MS),
            Folder(id="f3", name="Misc", created_at=now),
        ]


class FileKind(EntityKind[FileRecord]):
    entity_name = "file"
    index_name = "files"
    model = FileRecord

    def seed_data(self) -> List[FileRecord]:
        now = now_ms()
        return [
            FileRecord(
                id="file1", name="report.txt", folder_id="f1", size=1024, mime="text/plain",
                created_at=now - 10_000,
                content=_b64("This is a sample text file for the TeleFile application demo. "
                             "It demonstrates text file previews."),
            ),
            FileRecord(
                id="file2", name="vacation-photo.jpg", folder_id="f2", size=204800, mime="image/jpeg",
                created_at=now - 20_000,
                telegram=TelegramRef(external_file_id="mock_tg_id_1"),
            ),
            FileRecord(
                id="file3", name="project-archive.zip", folder_id="f1", size=1500000,
                mime="application/zip", created_at=now - 30_000,
            ),
            FileRecord(
                id="file4", name="logo-design.svg", folder_id="f2", size=15360, mime="image/svg+xml",
                created_at=now - 40_000,
                content=_b64('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
                             '<circle cx="50" cy="50" r="40" stroke="black" stroke-width="3" fill="red" /></svg>'),
            ),
            FileRecord(
                id="file5", name="meeting-notes.md", folder_id=None, size=2048, mime="text/markdown",
                created_at=now - 50_000,
                content=_b64("# Meeting Notes\n\n- Discuss project timeline\n- Review Q3 budget"),
            ),
            FileRecord(
                id="file6", name="audio-clip.mp3", folder_id="f3", size=800000, mime="audio/mpeg",
                created_at=now - 60_000,
            ),
        ]


class AppSettingsKind(EntityKind[AppSettings]):
    entity_name = "settings"
    index_name = "settings"
    model = AppSettings

    def initial_state(self, entity_id: str) -> AppSettings:
        return AppSettings(id=SETTINGS_ID, mock_mode=True)


FOLDERS = FolderKind()
FILES = FileKind()
APP_SETTINGS = AppSettingsKind()

# Kinds that receive demo data at startup
SEEDED_KINDS = (FOLDERS, FILES)


class FileEntity:
    """Handle on one file record, for operations beyond plain CRUD."""

    def __init__(self, store: IndexedEntityStore, file_id: str):
        self.store = store
        self.id = file_id

    def get_state(self) -> Optional[FileRecord]:
        return self.store.get(FILES, self.id)

    def save(self, state: FileRecord) -> FileRecord:
        return self.store.create(FILES, state)

    def save_content(self, content_b64: str) -> FileRecord:
        return self.store.patch(FILES, self.id, FilePatch(content=content_b64), must_exist=True)

    def get_content(self, state: Optional[FileRecord] = None) -> Optional[bytes]:
        """
        Decoded bytes of the file, or None when no content was stored.

        Pass an already loaded `state` to skip the read.
        """
        if state is None:
            state = self.get_state()
        if state is None or state.content is None:
            return None
        try:
            return base64.b64decode(state.content, validate=True)
        except (binascii.Error, ValueError):
            raise NoContent(f"Stored content of file {self.id} is not valid base64") from None

    def mark_as_forwarded(self, ref: TelegramRef) -> FileRecord:
        """Attach the forward marker unless one is already present."""
        def set_marker(current: FileRecord) -> FileRecord:
            if current.telegram is not None:
                logger.info(f"File {self.id} already forwarded, keeping existing marker")
                return current
            return current.model_copy(update={"telegram": ref})

        return self.store.mutate(FILES, self.id, set_marker, must_exist=True)


def get_app_settings(store: IndexedEntityStore) -> AppSettings:
    """Read the settings singleton, storing the defaults on first access."""
    current = store.get(APP_SETTINGS, SETTINGS_ID)
    if current is not None:
        return current
    try:
        return store.create(APP_SETTINGS, APP_SETTINGS.initial_state(SETTINGS_ID))
    except AlreadyExists:
        # Another request materialized it between our read and create
        return store.get(APP_SETTINGS, SETTINGS_ID) or APP_SETTINGS.initial_state(SETTINGS_ID)


def update_app_settings(store: IndexedEntityStore, changes: AppSettingsPatch) -> AppSettings:
    get_app_settings(store)
    return store.patch(APP_SETTINGS, SETTINGS_ID, changes)
