"""Document API endpoints

Provides:
- POST /upload: store a document under a deal
- GET /download/{deal_id}/{file_id}: stream a stored document
- GET /my-deals: list every document across the caller's deals

All endpoints require a bearer token; deal endpoints additionally require the
caller to be a participant of the deal.
"""

from dataclasses import asdict
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..auth.dependencies import CurrentCaller
from ..dependencies import get_document_index, get_download_service, get_upload_service
from ..domain.documents.ports.document_index_port import DocumentIndexPort
from .schemas import DocumentEntryResponse, ErrorResponse, UploadResponse
from .service import DownloadService, UploadService

router = APIRouter(tags=["Documents"])

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "No bearer token"},
    403: {"model": ErrorResponse, "description": "Invalid token or not a deal participant"},
    500: {"model": ErrorResponse, "description": "Storage or registry failure"},
}


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing input or rejected file"},
        404: {"model": ErrorResponse, "description": "Deal not found"},
        **_ERROR_RESPONSES,
    },
)
async def upload_document(
    caller_id: CurrentCaller,
    service: Annotated[UploadService, Depends(get_upload_service)],
    file: Annotated[Optional[UploadFile], File()] = None,
    deal_id: Annotated[Optional[str], Form(alias="dealId")] = None,
):
    """Upload a document to a deal

    Accepts multipart/form-data with a single `file` part and a `dealId`
    field. Supported file types: PDF, JPEG, PNG (max 5 MiB by default).
    The detected content type must match the declared one.

    At most one byte past the size limit is read into memory, which is
    enough for the pipeline to reject an oversized file.

    Example:
        curl -X POST http://localhost:8000/upload \\
          -H "Authorization: Bearer $TOKEN" \\
          -F "dealId=deal-1" \\
          -F "file=@contract.pdf;type=application/pdf"
    """
    data = await file.read(service.read_limit) if file is not None else None

    result = await service.upload(
        caller_id=caller_id,
        deal_id=deal_id,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        data=data,
        size=file.size if file is not None else None,
    )
    return UploadResponse(file_id=result.file_id, url=result.url)


@router.get(
    "/download/{deal_id}/{file_id}",
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "File content"},
        404: {"model": ErrorResponse, "description": "Deal or file not found"},
        **_ERROR_RESPONSES,
    },
)
def download_document(
    deal_id: str,
    file_id: str,
    caller_id: CurrentCaller,
    service: Annotated[DownloadService, Depends(get_download_service)],
):
    """Stream a stored document to a deal participant

    Content-Type and Content-Disposition come from the file record. If the
    transfer fails after the first bytes were sent, the connection is closed
    without an error body.
    """
    record = service.resolve(caller_id, deal_id, file_id)
    return service.open_response(record)


@router.get(
    "/my-deals",
    response_model=List[DocumentEntryResponse],
    responses=_ERROR_RESPONSES,
)
def my_documents(
    caller_id: CurrentCaller,
    index: Annotated[DocumentIndexPort, Depends(get_document_index)],
):
    """List all documents across every deal the caller participates in"""
    return [
        DocumentEntryResponse(**asdict(entry))
        for entry in index.list_documents_for(caller_id)
    ]
