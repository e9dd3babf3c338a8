"""
File storage endpoints.

Thin HTTP surface over the storage gateway, used by the course, video and
assignment services to store uploads and resolve their URLs.

Gateway calls do blocking disk and network I/O, so they run in the
threadpool rather than on the event loop.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ...core.storage.errors import EmptyInputError, LocalWriteError
from ..dependencies import SettingsDep, StorageGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class StoredFileResponse(BaseModel):
    """Response after storing an upload."""
    key: str = Field(description="Object key to persist alongside the owning record")
    url: str = Field(description="Best available URL for the object right now")


class FileUrlResponse(BaseModel):
    key: str
    url: str = Field(description="Signed, local or placeholder URL. Not proof the object exists.")


class FileExistsResponse(BaseModel):
    key: str
    exists: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=StoredFileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Store an uploaded file",
)
async def upload_file(
    file: Annotated[UploadFile, File(description="File to store")],
    gateway: StorageGatewayDep,
    settings: SettingsDep,
) -> StoredFileResponse:
    """
    Store a file and return its key.

    Remote storage problems never fail the upload; the file is served
    from local disk instead.
    """
    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    if file.size is not None and file.size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB",
        )

    logger.info(
        "File upload started",
        extra={
            "upload_filename": file.filename,
            "content_type": file.content_type,
            "size_bytes": file.size,
        },
    )

    try:
        key = await run_in_threadpool(
            gateway.store,
            file.file,
            file.filename,
            file.size,
            file.content_type,
        )
    except EmptyInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except LocalWriteError as e:
        logger.error("Failed to store file", extra={"error": e.message})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store file",
        )
    finally:
        await file.close()

    url = await run_in_threadpool(gateway.url_for, key)
    return StoredFileResponse(key=key, url=url)


@router.get(
    "/{key}/url",
    response_model=FileUrlResponse,
    summary="Resolve a download URL",
)
async def get_file_url(key: str, gateway: StorageGatewayDep) -> FileUrlResponse:
    url = await run_in_threadpool(gateway.url_for, key)
    return FileUrlResponse(key=key, url=url)


@router.get(
    "/{key}",
    response_model=FileExistsResponse,
    summary="Check whether a file exists",
)
async def get_file(key: str, gateway: StorageGatewayDep) -> FileExistsResponse:
    exists = await run_in_threadpool(gateway.exists, key)
    return FileExistsResponse(key=key, exists=exists)


@router.delete(
    "/{key}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a file from every tier",
)
async def delete_file(key: str, gateway: StorageGatewayDep) -> Response:
    """Idempotent: deleting a missing file also returns 204."""
    await run_in_threadpool(gateway.delete, key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
