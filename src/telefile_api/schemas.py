####################################
# --- Entity and request schemas --- #
####################################

from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

SETTINGS_ID = "app"


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Folder(CamelModel):
    """A single-level folder grouping files."""
    id: str
    name: str = ""
    created_at: int = Field(0, description="Creation time in epoch milliseconds.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"id": "f1", "name": "Documents", "createdAt": 1718000000000}
        }
    )


class TelegramRef(BaseModel):
    """Forward marker returned by the messaging service."""
    external_file_id: str = Field(description="Reference id of the document on Telegram.")
    external_file_name: Optional[str] = Field(None, description="File name Telegram stored.")


class FileRecord(CamelModel):
    """Metadata of a stored file, with its base64 content once uploaded."""
    id: str
    name: str = ""
    folder_id: Optional[str] = Field(None, description="Owning folder, null for the root.")
    size: int = Field(0, ge=0, description="Declared size of the file in bytes.")
    mime: str = ""
    created_at: int = Field(0, description="Creation time in epoch milliseconds.")
    content: Optional[str] = Field(None, description="Base64-encoded file bytes.")
    telegram: Optional[TelegramRef] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f1c2a8e-8d7b-4a55-9b0e-1e2f3a4b5c6d",
                "name": "report.txt",
                "folderId": "f1",
                "size": 10,
                "mime": "text/plain",
                "createdAt": 1718000000000,
                "content": "aGVsbG8gd29ybGQ=",
            }
        }
    )


class FilePatch(CamelModel):
    """Fields of a file that can be overwritten; unset fields are left alone."""
    name: Optional[str] = None
    folder_id: Optional[str] = None
    content: Optional[str] = None
    telegram: Optional[TelegramRef] = None


class AppSettings(CamelModel):
    """Singleton application configuration."""
    id: Literal["app"] = SETTINGS_ID
    bot_token: Optional[str] = None
    channel_id: Optional[str] = None
    mock_mode: Optional[bool] = None


class AppSettingsPatch(CamelModel):
    bot_token: Optional[str] = None
    channel_id: Optional[str] = None
    mock_mode: Optional[bool] = None

    model_config = ConfigDict(
        json_schema_extra={"example": {"botToken": "123456:ABC-DEF", "channelId": "@my_channel"}}
    )


class CreateFolderRequest(BaseModel):
    name: Optional[str] = None


class UpdateFileRequest(CamelModel):
    """Body of `PATCH /api/files/:id`: rename and/or move."""
    name: Optional[str] = None
    folder_id: Optional[str] = None


class DeleteManyRequest(BaseModel):
    ids: Optional[List[str]] = None


class DeleteResult(BaseModel):
    id: str
    deleted: bool


class DeleteManyResult(CamelModel):
    deleted_count: int
    ids: List[str]


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every API response."""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
