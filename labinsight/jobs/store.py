from abc import ABC, abstractmethod
from typing import Any

from labinsight.jobs.models import AnalysisJob, AnalysisRequest
from labinsight.normalization.models import CanonicalResult

# Progress 100 is reserved for the completion transition.
MAX_RUNNING_PROGRESS = 99


class BaseJobStore(ABC):
    """Persistence for analysis jobs.

    Implementations enforce the forward-only rules themselves: progress never
    decreases, terminal jobs are immutable and completion is first-call-wins.
    """

    @abstractmethod
    def create(self, request: AnalysisRequest) -> AnalysisJob:
        """Insert a new pending job at progress 0."""

    @abstractmethod
    def get(self, job_id: str) -> AnalysisJob | None:
        ...

    @abstractmethod
    def mark_processing(self, job_id: str, message: str | None = None) -> bool:
        """Move a pending job to processing. Returns False if not pending."""

    @abstractmethod
    def update_progress(
        self,
        job_id: str,
        progress: int,
        *,
        message: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> AnalysisJob | None:
        """Raise progress on a non-terminal job; lower values are ignored."""

    @abstractmethod
    def mark_completed(
        self,
        job_id: str,
        canonical_result: CanonicalResult,
        raw_result: Any = None,
        message: str | None = None,
    ) -> bool:
        """Complete a processing job with progress 100. Returns False if it was not processing."""

    @abstractmethod
    def mark_failed(self, job_id: str, error_kind: str, error: str) -> bool:
        """Fail a non-terminal job. Returns False if it was already terminal."""

    @abstractmethod
    def find_active_by_subject(self, subject_key: str) -> AnalysisJob | None:
        """Return a pending or processing job for the subject, if any."""

    @abstractmethod
    def latest_completed_by_subject(self, subject_id: str) -> AnalysisJob | None:
        ...


def clamp_progress(progress: int) -> int:
    return max(0, min(int(progress), MAX_RUNNING_PROGRESS))
