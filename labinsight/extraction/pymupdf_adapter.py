import pymupdf

from labinsight.extraction.base import BasePdfExtractor
from labinsight.extraction.exceptions import (
    ExtractionError,
    ExtractionErrorKind,
    classify_engine_error,
)


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts page text from PDF using PyMuPDF."""

    name = "pymupdf"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise ExtractionError(ExtractionErrorKind.PASSWORD_PROTECTED)
                return [page.get_text() for page in doc]
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                classify_engine_error(exc), f"pymupdf: {type(exc).__name__}: {exc}"
            ) from exc
