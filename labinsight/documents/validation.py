from collections.abc import Iterable

from labinsight.documents.exceptions import UploadRejectedError
from labinsight.extraction.models import DocumentKind
from labinsight.extraction.signatures import detect_document_kind


class UploadValidator:
    """Checks uploads before anything is stored or extracted."""

    def __init__(self, allowed_mime_types: Iterable[str], max_bytes: int) -> None:
        self._allowed = {mime.lower() for mime in allowed_mime_types}
        self._max_bytes = max_bytes

    def validate(self, data: bytes, declared_mime_type: str | None) -> DocumentKind:
        """Return the detected kind of an acceptable upload.

        Raises:
            UploadRejectedError: wrong declared type, oversized, or bytes that
                do not match an allowed signature.
        """
        declared = (declared_mime_type or "").split(";")[0].strip().lower()
        if declared not in self._allowed:
            raise UploadRejectedError(
                UploadRejectedError.UNSUPPORTED_TYPE,
                f"File type '{declared or 'unknown'}' is not accepted. "
                f"Allowed: {', '.join(sorted(self._allowed))}",
            )
        if len(data) > self._max_bytes:
            raise UploadRejectedError(
                UploadRejectedError.TOO_LARGE,
                f"File is {len(data)} bytes; the limit is {self._max_bytes} bytes",
            )
        kind = detect_document_kind(data)
        if kind is None or kind.mime_type not in self._allowed:
            raise UploadRejectedError(
                UploadRejectedError.SIGNATURE_MISMATCH,
                "File content does not match an accepted document format",
            )
        return kind
