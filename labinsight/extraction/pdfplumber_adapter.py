import io

import pdfplumber

from labinsight.extraction.base import BasePdfExtractor
from labinsight.extraction.exceptions import ExtractionError, classify_engine_error


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts page text from PDF using pdfplumber."""

    name = "pdfplumber"

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return [page.extract_text() or "" for page in pdf.pages]
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                classify_engine_error(exc), f"pdfplumber: {type(exc).__name__}: {exc}"
            ) from exc
