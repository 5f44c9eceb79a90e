"""Document text extraction with size/signature validation and a hard timeout."""

import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from labinsight.extraction.base import BasePdfExtractor
from labinsight.extraction.exceptions import ExtractionError, ExtractionErrorKind
from labinsight.extraction.models import (
    DocumentKind,
    ExtractedDocument,
    PageText,
    QualityMetrics,
)
from labinsight.extraction.signatures import detect_document_kind
from labinsight.logging.logger import Log

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_EXCESS_SPACES = re.compile(r"[ \t\f\v]{2,}")
_MEANINGFUL_WORD = re.compile(r"[A-Za-z]{3,}")

HIGH_QUALITY_CHARS_PER_PAGE = 200


def clean_text(text: str) -> str:
    """Collapse 3+ line breaks into 2 and runs of spaces into one."""
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    text = _EXCESS_SPACES.sub(" ", text)
    return text.strip()


def assess_quality(text: str, page_count: int) -> QualityMetrics:
    average = len(text) / page_count if page_count > 0 else 0.0
    return QualityMetrics(
        is_empty=not text,
        contains_meaningful_text=bool(_MEANINGFUL_WORD.search(text)),
        average_chars_per_page=average,
        is_likely_high_quality=average > HIGH_QUALITY_CHARS_PER_PAGE,
    )


class DocumentExtractor:
    """Turns uploaded document bytes into cleaned page text plus quality metadata."""

    def __init__(
        self,
        engine: BasePdfExtractor,
        timeout_seconds: float = 30,
        min_bytes: int = 100,
    ) -> None:
        self._engine = engine
        self._timeout_seconds = timeout_seconds
        self._min_bytes = min_bytes

    def validate(self, data: bytes) -> DocumentKind:
        """Check size and magic bytes without parsing the document.

        Raises:
            ExtractionError: ``too_small`` or ``not_a_document``.
        """
        if len(data) < self._min_bytes:
            raise ExtractionError(
                ExtractionErrorKind.TOO_SMALL,
                f"{len(data)} bytes, minimum is {self._min_bytes}",
            )
        kind = detect_document_kind(data)
        if kind is None:
            raise ExtractionError(
                ExtractionErrorKind.NOT_A_DOCUMENT,
                f"leading bytes {data[:8].hex(' ')}",
            )
        return kind

    def extract(self, data: bytes) -> ExtractedDocument:
        """Extract text from a PDF.

        Raises:
            ExtractionError: on any failure; extraction never partially succeeds.
        """
        kind = self.validate(data)
        if kind is not DocumentKind.PDF:
            raise ExtractionError(
                ExtractionErrorKind.NOT_A_DOCUMENT,
                f"{kind.value} images carry no extractable text layer",
            )

        raw_pages = self._run_with_timeout(data)
        pages = [
            PageText(index=number, raw_text=cleaned)
            for number, cleaned in enumerate((clean_text(p) for p in raw_pages), start=1)
            if cleaned
        ]
        if not pages:
            raise ExtractionError(ExtractionErrorKind.EMPTY_FILE)

        full_text = "\n\n".join(page.raw_text for page in pages)
        quality = assess_quality(full_text, len(raw_pages))
        Log.info(
            f"Extracted {len(full_text)} chars from {len(pages)}/{len(raw_pages)} pages",
            engine=self._engine.name,
            avg_chars_per_page=round(quality.average_chars_per_page, 1),
            meaningful=quality.contains_meaningful_text,
        )
        if not quality.contains_meaningful_text:
            Log.warning("Extracted text contains no recognisable words")
        return ExtractedDocument(
            pages=pages,
            quality_metrics=quality,
            page_count=len(raw_pages),
            engine=self._engine.name,
        )

    def _run_with_timeout(self, data: bytes) -> list[str]:
        # A worker stuck inside the engine cannot be killed; it is abandoned.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="extract")
        future = executor.submit(self._engine.extract_pages, data)
        try:
            return future.result(timeout=self._timeout_seconds)
        except FutureTimeoutError as exc:
            raise ExtractionError(
                ExtractionErrorKind.TIMEOUT,
                f"exceeded {self._timeout_seconds}s",
            ) from exc
        except ExtractionError:
            raise
        except MemoryError as exc:
            raise ExtractionError(ExtractionErrorKind.MEMORY_LIMIT) from exc
        except Exception as exc:
            raise ExtractionError(ExtractionErrorKind.UNKNOWN, str(exc)) from exc
        finally:
            executor.shutdown(wait=False)
