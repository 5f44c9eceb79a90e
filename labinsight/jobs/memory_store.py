import threading
import uuid
from dataclasses import replace
from typing import Any

from labinsight.jobs.models import AnalysisJob, AnalysisRequest, JobStatus, utcnow
from labinsight.jobs.status_machine import check_transition
from labinsight.jobs.store import BaseJobStore, clamp_progress
from labinsight.normalization.models import CanonicalResult


class InMemoryJobStore(BaseJobStore):
    """Process-local job store. Snapshots are frozen, so readers need no lock."""

    def __init__(self) -> None:
        self._jobs: dict[str, AnalysisJob] = {}
        self._lock = threading.Lock()

    def create(self, request: AnalysisRequest) -> AnalysisJob:
        job = AnalysisJob(
            id=uuid.uuid4().hex,
            status=JobStatus.PENDING,
            subject_id=request.subject_id,
            document_ref=request.document_ref,
            message="Waiting to start",
        )
        with self._lock:
            self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> AnalysisJob | None:
        return self._jobs.get(job_id)

    def mark_processing(self, job_id: str, message: str | None = None) -> bool:
        return self._transition(job_id, JobStatus.PROCESSING, message=message)

    def update_progress(
        self,
        job_id: str,
        progress: int,
        *,
        message: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> AnalysisJob | None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.status.is_terminal:
                return job
            updated = replace(
                job,
                progress=max(job.progress, clamp_progress(progress)),
                message=message if message is not None else job.message,
                total_pages=total_pages if total_pages is not None else job.total_pages,
                processed_pages=max(job.processed_pages, processed_pages or 0),
                updated_at=utcnow(),
            )
            self._jobs[job_id] = updated
            return updated

    def mark_completed(
        self,
        job_id: str,
        canonical_result: CanonicalResult,
        raw_result: Any = None,
        message: str | None = None,
    ) -> bool:
        return self._transition(
            job_id,
            JobStatus.COMPLETED,
            progress=100,
            canonical_result=canonical_result,
            raw_result=raw_result,
            message=message,
        )

    def mark_failed(self, job_id: str, error_kind: str, error: str) -> bool:
        return self._transition(
            job_id, JobStatus.FAILED, error_kind=error_kind, error=error, message=error
        )

    def find_active_by_subject(self, subject_key: str) -> AnalysisJob | None:
        for job in list(self._jobs.values()):
            if job.status.is_terminal:
                continue
            if subject_key in (job.subject_id, job.document_ref):
                return job
        return None

    def latest_completed_by_subject(self, subject_id: str) -> AnalysisJob | None:
        completed = [
            job
            for job in list(self._jobs.values())
            if job.subject_id == subject_id and job.status is JobStatus.COMPLETED
        ]
        # Ties go to the most recently created job.
        return max(reversed(completed), key=lambda job: job.updated_at, default=None)

    def _transition(self, job_id: str, target: JobStatus, **changes: Any) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or not check_transition(job_id, job.status, target):
                return False
            if changes.get("message") is None:
                changes.pop("message", None)
            self._jobs[job_id] = replace(job, status=target, updated_at=utcnow(), **changes)
            return True
