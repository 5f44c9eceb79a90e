from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from labinsight.normalization.models import CanonicalResult


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AnalysisRequest:
    """What a caller submits: a stored document, a manual text summary, or both."""

    subject_id: str | None = None
    document_ref: str | None = None
    manual_summary_text: str | None = None

    @property
    def has_input(self) -> bool:
        return bool(self.document_ref) or bool(
            self.manual_summary_text and self.manual_summary_text.strip()
        )

    @property
    def subject_key(self) -> str | None:
        """Identity of the logical subject used by the in-flight guard."""
        return self.subject_id or self.document_ref


@dataclass(frozen=True)
class AnalysisJob:
    """Read-only snapshot of one analysis job."""

    id: str
    status: JobStatus
    subject_id: str | None = None
    document_ref: str | None = None
    progress: int = 0
    total_pages: int = 0
    processed_pages: int = 0
    message: str | None = None
    raw_result: Any = None
    canonical_result: CanonicalResult | None = None
    error_kind: str | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_processing(self) -> bool:
        return not self.status.is_terminal
