from dataclasses import dataclass
from enum import Enum


class DocumentKind(str, Enum):
    """Binary formats recognised from magic bytes."""

    PDF = "pdf"
    JPEG = "jpeg"
    PNG = "png"

    @property
    def mime_type(self) -> str:
        return {
            DocumentKind.PDF: "application/pdf",
            DocumentKind.JPEG: "image/jpeg",
            DocumentKind.PNG: "image/png",
        }[self]

    @property
    def is_image(self) -> bool:
        return self is not DocumentKind.PDF


@dataclass(frozen=True)
class PageText:
    """Cleaned text of one source page. ``index`` is 1-based."""

    index: int
    raw_text: str


@dataclass(frozen=True)
class QualityMetrics:
    """Advisory quality metadata; never used as a correctness gate.

    ``is_empty`` is only True for blank text, so it is always False on a
    successful ``ExtractedDocument``; blank input fails as ``empty_file`` first.
    """

    is_empty: bool
    contains_meaningful_text: bool
    average_chars_per_page: float
    is_likely_high_quality: bool


@dataclass(frozen=True)
class ExtractedDocument:
    """Output of a successful extraction: at least one non-empty page."""

    pages: list[PageText]
    quality_metrics: QualityMetrics
    page_count: int = 0
    engine: str = ""
