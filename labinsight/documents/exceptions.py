class DocumentError(Exception):
    """Base exception for document storage errors."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document reference does not resolve to a stored file."""


class UploadRejectedError(DocumentError):
    """Raised when an upload violates the type, size or signature constraints."""

    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    SIGNATURE_MISMATCH = "signature_mismatch"

    def __init__(self, reason: str, detail: str) -> None:
        super().__init__(detail)
        self.reason = reason
        self.detail = detail
