from fastapi import APIRouter, Depends, Request, UploadFile

from labinsight.api.dependencies import get_file_store, get_upload_validator
from labinsight.api.schemas import UploadResponse
from labinsight.documents.file_store import FileStore
from labinsight.documents.validation import UploadValidator
from labinsight.logging.logger import Log

router = APIRouter(tags=["documents"])


@router.post("/documents", response_model=UploadResponse, status_code=201)
async def upload_document(
    file: UploadFile,
    request: Request,
    file_store: FileStore = Depends(get_file_store),
    validator: UploadValidator = Depends(get_upload_validator),
) -> UploadResponse:
    """Validate and store an uploaded PDF, JPEG or PNG."""
    max_bytes = request.app.state.settings.max_upload_bytes
    # One byte past the limit is enough to reject oversized uploads.
    data = await file.read(max_bytes + 1)
    kind = validator.validate(data, file.content_type)
    stored = file_store.save(data, kind)
    Log.info(
        f"Stored document {stored.document_ref}",
        mime_type=stored.mime_type,
        size_bytes=stored.size_bytes,
    )
    return UploadResponse(
        document_ref=stored.document_ref,
        mime_type=stored.mime_type,
        size_bytes=stored.size_bytes,
    )
