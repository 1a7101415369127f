import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends

from entity_store import IndexedEntityStore

from telefile_api.dependencies import get_store
from telefile_api.entities import FOLDERS, now_ms
from telefile_api.errors import ValidationError
from telefile_api.schemas import (
    ApiResponse,
    CreateFolderRequest,
    DeleteManyRequest,
    DeleteManyResult,
    DeleteResult,
    Folder,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/api/folders", response_model=ApiResponse[List[Folder]], response_model_exclude_none=True)
def list_folders(store: IndexedEntityStore = Depends(get_store)):
    """List every folder in creation order."""
    return ApiResponse(data=store.list_all(FOLDERS))

@router.post("/api/folders", response_model=ApiResponse[Folder], response_model_exclude_none=True)
def create_folder(request: CreateFolderRequest, store: IndexedEntityStore = Depends(get_store)):
    """Create a folder; the name is required and may not be blank."""
    name = (request.name or "").strip()
    if not name:
        raise ValidationError("Folder name is required")
    folder = store.create(FOLDERS, Folder(id=str(uuid.uuid4()), name=name, created_at=now_ms()))
    return ApiResponse(data=folder)

@router.delete("/api/folders/{folder_id}", response_model=ApiResponse[DeleteResult], response_model_exclude_none=True)
def delete_folder(folder_id: str, store: IndexedEntityStore = Depends(get_store)):
    """
    Delete a folder.

    Files that referenced it keep their dangling folderId.
    """
    deleted = store.delete(FOLDERS, folder_id)
    return ApiResponse(data=DeleteResult(id=folder_id, deleted=deleted))

@router.post("/api/folders/deleteMany", response_model=ApiResponse[DeleteManyResult], response_model_exclude_none=True)
def delete_folders(request: DeleteManyRequest, store: IndexedEntityStore = Depends(get_store)):
    ids = [folder_id for folder_id in (request.ids or []) if folder_id]
    if not ids:
        raise ValidationError("ids required")
    deleted_count = store.delete_many(FOLDERS, ids)
    return ApiResponse(data=DeleteManyResult(deleted_count=deleted_count, ids=ids))
