"""File-manager REST API: browse directories, read, create, update and delete items."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from fileserver.config.config import settings
from fileserver.schemas.files import (
    CreateItemRequest,
    DeleteResponse,
    ErrorResponse,
    FileContent,
    FileRecord,
    UpdateItemRequest,
)
from fileserver.services import file_ops
from fileserver.services.dir_walker import extension_filter

router = APIRouter(
    tags=["files"],
    responses={500: {"model": ErrorResponse, "description": "Unexpected filesystem failure"}},
)

RequiredPath = Annotated[
    str, Query(min_length=1, description="Filesystem path, absolute or relative to the server's working directory.")
]

_BAD_REQUEST: dict[int | str, dict[str, Any]] = {400: {"model": ErrorResponse, "description": "Invalid argument"}}
_NOT_FOUND: dict[int | str, dict[str, Any]] = {404: {"model": ErrorResponse, "description": "Path not found"}}
_CONFLICT: dict[int | str, dict[str, Any]] = {409: {"model": ErrorResponse, "description": "Path exists as a file"}}


@router.get(
    "/files",
    response_model=list[FileRecord],
    response_model_exclude_none=True,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def list_files(
    path: str = Query(default="", description="Directory to list. Defaults to the configured default path."),
) -> list[FileRecord]:
    """List the immediate children of a directory, directories first, then by name."""
    return await file_ops.list_directory(path or settings.default_path)


@router.get(
    "/files/walk",
    response_model=list[FileRecord],
    response_model_exclude_none=True,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def walk_files(
    path: str = Query(default="", description="Directory to walk. Defaults to the configured default path."),
    ext: list[str] = Query(default=[], description="Extension allow-list, e.g. ?ext=mp4&ext=mkv."),
) -> list[FileRecord]:
    """Every file below a directory, as a flat list. Directories themselves are not listed."""
    extensions = ext or settings.walk_extensions
    accept = extension_filter(extensions) if extensions else None
    return await file_ops.walk_directory(path or settings.default_path, accept)


@router.post(
    "/files",
    response_model=FileRecord,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_CONFLICT},
)
async def create_file(body: CreateItemRequest) -> FileRecord:
    return await file_ops.create_item(body.path, is_dir=body.is_dir, content=body.content)


@router.get(
    "/file",
    response_model=FileRecord | FileContent,
    response_model_exclude_none=True,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def get_file(
    path: RequiredPath,
    content: bool = Query(default=False, description="Include the file's text content."),
) -> FileRecord | FileContent:
    """File metadata, or with ``?content=true`` the whole file as text. No size limit applies."""
    return await file_ops.get_file(path, include_content=content)


@router.put(
    "/file",
    response_model=FileRecord,
    response_model_exclude_none=True,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
async def update_file(body: UpdateItemRequest) -> FileRecord:
    return await file_ops.update_item(body.path, body.content)


@router.delete("/file", response_model=DeleteResponse, responses={**_BAD_REQUEST, **_NOT_FOUND})
async def delete_file(path: RequiredPath) -> DeleteResponse:
    deleted = await file_ops.delete_item(path)
    return DeleteResponse(message=f"Deleted {deleted}")
