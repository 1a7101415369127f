import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    Query,
    Response,
    UploadFile,
)

from entity_store import IndexedEntityStore

from telefile_api.dependencies import get_pipeline, get_store
from telefile_api.entities import FILES
from telefile_api.errors import NotFound, ValidationError
from telefile_api.pipeline import FilePipeline, normalize_folder_id
from telefile_api.schemas import (
    ApiResponse,
    DeleteManyRequest,
    DeleteManyResult,
    DeleteResult,
    FileRecord,
    UpdateFileRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def content_disposition(filename: str) -> str:
    """Attachment header carrying both an ASCII fallback and the UTF-8 name."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"

@router.get("/api/files", response_model=ApiResponse[List[FileRecord]], response_model_exclude_none=True)
def list_files(
    folder_id: Optional[str] = Query(None, alias="folderId"),
    store: IndexedEntityStore = Depends(get_store),
):
    """
    List files of one folder.

    Without `folderId` (or with `null`) the files at the root are returned.
    """
    folder_id = normalize_folder_id(folder_id)
    files = [f for f in store.list_all(FILES) if f.folder_id == folder_id]
    return ApiResponse(data=files)

@router.post("/api/files/deleteMany", response_model=ApiResponse[DeleteManyResult], response_model_exclude_none=True)
def delete_files(request: DeleteManyRequest, store: IndexedEntityStore = Depends(get_store)):
    ids = [file_id for file_id in (request.ids or []) if file_id]
    if not ids:
        raise ValidationError("ids required")
    deleted_count = store.delete_many(FILES, ids)
    return ApiResponse(data=DeleteManyResult(deleted_count=deleted_count, ids=ids))

@router.get("/api/files/{file_id}", response_model=ApiResponse[FileRecord], response_model_exclude_none=True)
def get_file(
    file_id: str = Path(..., description="The id of the file"),
    store: IndexedEntityStore = Depends(get_store),
):
    state = store.get(FILES, file_id)
    if state is None:
        raise NotFound("File not found")
    return ApiResponse(data=state)

@router.patch("/api/files/{file_id}", response_model=ApiResponse[FileRecord], response_model_exclude_none=True)
def update_file(
    request: UpdateFileRequest,
    file_id: str = Path(..., description="The id of the file"),
    store: IndexedEntityStore = Depends(get_store),
):
    """
    Rename and/or move a file.

    Only the fields present in the body change; `folderId: null` moves the
    file to the root.
    """
    if "name" in request.model_fields_set:
        name = (request.name or "").strip()
        if not name:
            raise ValidationError("File name cannot be empty")
        request.name = name
    if "folder_id" in request.model_fields_set:
        request.folder_id = normalize_folder_id(request.folder_id)
    updated = store.patch(FILES, file_id, request, must_exist=True)
    return ApiResponse(data=updated)

@router.delete("/api/files/{file_id}", response_model=ApiResponse[DeleteResult], response_model_exclude_none=True)
def delete_file(file_id: str, store: IndexedEntityStore = Depends(get_store)):
    deleted = store.delete(FILES, file_id)
    return ApiResponse(data=DeleteResult(id=file_id, deleted=deleted))

@router.post("/api/upload", response_model=ApiResponse[FileRecord], response_model_exclude_none=True)
def upload_file(
    file: Optional[UploadFile] = File(None),
    url: Optional[str] = Form(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    pipeline: FilePipeline = Depends(get_pipeline),
):
    """
    Upload a file from the multipart body or from a URL.

    The stored record is forwarded to Telegram right away when a bot token
    is configured.
    """
    content = filename = mime = None
    if file is not None:
        # One byte past the ceiling is enough to reject the upload
        content = file.file.read(pipeline.max_upload_bytes + 1)
        filename = file.filename
        mime = file.content_type
    record = pipeline.upload(
        content=content,
        filename=filename,
        mime=mime,
        url=(url or "").strip() or None,
        folder_id=folder_id,
    )
    return ApiResponse(data=record)

@router.get("/api/files/{file_id}/download")
def download_file(file_id: str, pipeline: FilePipeline = Depends(get_pipeline)):
    """Return the raw bytes of a file as an attachment."""
    downloaded = pipeline.download(file_id)
    # Stored type is sent verbatim; media_type would append a charset to text types
    return Response(
        content=downloaded.content,
        headers={
            "Content-Type": downloaded.mime,
            "Content-Disposition": content_disposition(downloaded.filename),
        },
    )

@router.post("/api/files/{file_id}/forward", response_model=ApiResponse[FileRecord], response_model_exclude_none=True)
def forward_file(file_id: str, pipeline: FilePipeline = Depends(get_pipeline)):
    return ApiResponse(data=pipeline.forward(file_id))
