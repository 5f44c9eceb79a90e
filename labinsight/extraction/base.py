from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    name: str = ""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract raw text from PDF bytes, one entry per page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Page texts in document order. Pages without text yield "".

        Raises:
            ExtractionError: if the engine cannot read the document.
        """
