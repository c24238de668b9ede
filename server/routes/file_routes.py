"""File operation API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse, StreamingResponse

from common.exceptions import SharingInactiveError
from common.logging_config import get_logger
from server.archive import archive_filename
from server.context import AppContext, get_context
from server.schemas.common import MessageResponse
from server.schemas.files import FileRecordResponse, UploadedFile, UploadResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])

content_router = APIRouter(prefix="/files", tags=["Content"])


@router.get("/files", response_model=List[FileRecordResponse])
async def list_files(context: AppContext = Depends(get_context)):
    """
    List the files currently shared.

    Returns:
        - name, size, modified, url for every file in the shared folder

    Raises:
        - 500: Shared folder unreadable
    """
    return [FileRecordResponse.from_record(record) for record in context.store.list()]


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    context: AppContext = Depends(get_context),
):
    """
    Store one uploaded file.

    Parameters:
        - file: File to upload (multipart/form-data)

    Returns:
        - message and the stored name, original name and size.
          The stored name carries a timestamp prefix if the original was taken.

    Raises:
        - 400: No file uploaded, or unusable file name
        - 500: Write failure
    """
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    file_content = await file.read()
    record = context.store.put(file.filename or "", file_content)
    logger.info(f"Uploaded {record.name} ({record.size} bytes)")

    return UploadResponse(
        message="File uploaded successfully",
        file=UploadedFile(name=record.name, original_name=file.filename, size=record.size),
    )


@router.delete("/files/{filename}", response_model=MessageResponse)
async def delete_file(filename: str, context: AppContext = Depends(get_context)):
    """
    Delete one shared file.

    Raises:
        - 404: File not found
        - 500: Delete failure
    """
    context.store.delete(filename)
    logger.info(f"Deleted {filename}")
    return MessageResponse(message="File deleted successfully")


@router.get("/download-all")
async def download_all(context: AppContext = Depends(get_context)):
    """
    Download every shared file as one zip archive.

    Raises:
        - 404: No files to download
    """
    stream = context.store.export_archive()
    return StreamingResponse(
        stream,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_filename()}"'},
    )


@content_router.api_route("/{filename}", methods=["GET", "HEAD"])
async def get_file_content(
    filename: str,
    request: Request,
    context: AppContext = Depends(get_context),
):
    """
    Serve raw file content.

    Non-local peers are refused while sharing is inactive; the local
    interface (loopback or a request with a referer) is always served.

    Raises:
        - 404: File not found
        - 503: Sharing inactive
    """
    client_host = request.client.host if request.client else None
    if not context.session.allows_file_access(client_host, request.headers.get("referer")):
        raise SharingInactiveError("Sharing is currently inactive")

    path = context.store.path_for(filename)
    return FileResponse(path)
