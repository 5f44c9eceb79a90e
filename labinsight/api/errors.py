"""Exception handlers mapping domain errors to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from labinsight.documents.exceptions import DocumentNotFoundError, UploadRejectedError
from labinsight.extraction.exceptions import ExtractionError
from labinsight.jobs.exceptions import InvalidInputError, JobNotFoundError


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(JobNotFoundError)
    async def handle_job_not_found(request: Request, exc: JobNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc), "type": "not_found"})

    @app.exception_handler(DocumentNotFoundError)
    async def handle_document_not_found(
        request: Request, exc: DocumentNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404, content={"error": str(exc), "type": "document_not_found"}
        )

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": str(exc), "type": "invalid_input"})

    @app.exception_handler(ExtractionError)
    async def handle_extraction_error(request: Request, exc: ExtractionError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": exc.message, "type": "extraction_error", "kind": exc.kind.value},
        )

    @app.exception_handler(UploadRejectedError)
    async def handle_upload_rejected(request: Request, exc: UploadRejectedError) -> JSONResponse:
        status_code = 413 if exc.reason == UploadRejectedError.TOO_LARGE else 415
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.detail, "type": "upload_rejected", "reason": exc.reason},
        )
