import pytest

from labinsight.extraction.exceptions import ExtractionError
from labinsight.extraction.pdfplumber_adapter import PdfPlumberAdapter


class TestPdfPlumberAdapter:
    def test_extract_returns_one_entry_per_page(self, multi_page_pdf_bytes: bytes) -> None:
        pages = PdfPlumberAdapter().extract_pages(multi_page_pdf_bytes)
        assert len(pages) == 2
        assert "Page one content" in pages[0]
        assert "Page two content" in pages[1]

    def test_extract_single_page(self, sample_pdf_bytes: bytes) -> None:
        pages = PdfPlumberAdapter().extract_pages(sample_pdf_bytes)
        assert "Hello PDF World" in pages[0]

    def test_blank_page_yields_empty_string(self, empty_pdf_bytes: bytes) -> None:
        pages = PdfPlumberAdapter().extract_pages(empty_pdf_bytes)
        assert pages == [""]

    def test_invalid_bytes_raise_extraction_error(self) -> None:
        with pytest.raises(ExtractionError):
            PdfPlumberAdapter().extract_pages(b"not a pdf")
