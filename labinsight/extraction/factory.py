from labinsight.config.settings import Settings
from labinsight.extraction.base import BasePdfExtractor
from labinsight.extraction.extractor import DocumentExtractor
from labinsight.extraction.pdfplumber_adapter import PdfPlumberAdapter
from labinsight.extraction.pymupdf_adapter import PyMuPdfAdapter


class ExtractorFactory:
    """Creates the document extractor around the configured PDF engine."""

    ENGINES: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> DocumentExtractor:
        engine = settings.extraction_engine.lower()
        engine_cls = cls.ENGINES.get(engine)
        if engine_cls is None:
            raise ValueError(
                f"Unknown extraction engine '{engine}'. Choose from: {list(cls.ENGINES)}"
            )
        return DocumentExtractor(
            engine=engine_cls(),
            timeout_seconds=settings.extraction_timeout_seconds,
            min_bytes=settings.min_document_bytes,
        )
