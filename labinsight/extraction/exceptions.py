from enum import Enum


class ExtractionErrorKind(str, Enum):
    PASSWORD_PROTECTED = "password_protected"
    CORRUPT_FILE = "corrupt_file"
    MEMORY_LIMIT = "memory_limit"
    EMPTY_FILE = "empty_file"
    TOO_SMALL = "too_small"
    NOT_A_DOCUMENT = "not_a_document"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


EXTRACTION_ERROR_MESSAGES: dict[ExtractionErrorKind, str] = {
    ExtractionErrorKind.PASSWORD_PROTECTED: (
        "The PDF is password protected and cannot be processed."
    ),
    ExtractionErrorKind.CORRUPT_FILE: "The PDF file appears to be corrupted or invalid.",
    ExtractionErrorKind.MEMORY_LIMIT: "The PDF is too large or too complex to be processed.",
    ExtractionErrorKind.EMPTY_FILE: "No text could be extracted from the document.",
    ExtractionErrorKind.TOO_SMALL: "The file is too small to be a valid document.",
    ExtractionErrorKind.NOT_A_DOCUMENT: (
        "The file is not a supported document (expected PDF, JPEG or PNG)."
    ),
    ExtractionErrorKind.TIMEOUT: (
        "Document processing exceeded the time limit. "
        "The document may be too complex or corrupted."
    ),
    ExtractionErrorKind.UNKNOWN: "An unknown error occurred while processing the document.",
}

# Ordered: the first matching keyword group wins.
_ENGINE_ERROR_KEYWORDS: tuple[tuple[ExtractionErrorKind, tuple[str, ...]], ...] = (
    (ExtractionErrorKind.PASSWORD_PROTECTED, ("password", "encrypt")),
    (ExtractionErrorKind.MEMORY_LIMIT, ("memory", "heap")),
    (
        ExtractionErrorKind.CORRUPT_FILE,
        ("corrupt", "invalid", "syntax", "eof", "xref", "root", "broken", "failed to open"),
    ),
)


class ExtractionError(Exception):
    """Raised when a document cannot be turned into text."""

    def __init__(self, kind: ExtractionErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self.message if not detail else f"{self.message} ({detail})")

    @property
    def message(self) -> str:
        return EXTRACTION_ERROR_MESSAGES[self.kind]


def classify_engine_error(exc: BaseException) -> ExtractionErrorKind:
    """Map an engine exception onto the extraction error taxonomy."""
    if isinstance(exc, MemoryError):
        return ExtractionErrorKind.MEMORY_LIMIT
    haystack = f"{type(exc).__name__} {exc}".lower()
    for kind, keywords in _ENGINE_ERROR_KEYWORDS:
        if any(keyword in haystack for keyword in keywords):
            return kind
    return ExtractionErrorKind.UNKNOWN
