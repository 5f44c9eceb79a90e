import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from labinsight.analysis.analyzer import LabAnalyzer
from labinsight.analysis.factory import AnalyzerFactory
from labinsight.config.settings import Settings
from labinsight.database.repositories.job_repository import PostgresJobRepository
from labinsight.documents.file_store import FileStore
from labinsight.extraction.extractor import DocumentExtractor
from labinsight.extraction.factory import ExtractorFactory
from labinsight.jobs.exceptions import (
    InvalidInputError,
    JobAlreadyRunningError,
    JobNotFoundError,
)
from labinsight.jobs.job_runner import JobRunner
from labinsight.jobs.memory_store import InMemoryJobStore
from labinsight.jobs.models import AnalysisJob, AnalysisRequest, JobStatus
from labinsight.jobs.store import BaseJobStore
from labinsight.logging.logger import Log
from labinsight.normalization.models import CanonicalResult


class AnalysisJobController:
    """Owns the lifecycle of analysis jobs.

    ``submit`` returns as soon as the job exists; extraction and the AI call
    run on a background thread pool owned by the controller. Only the
    controller and its runner write job records.
    """

    def __init__(
        self,
        store: BaseJobStore,
        extractor: DocumentExtractor,
        analyzer: LabAnalyzer,
        file_store: FileStore,
        max_workers: int = 4,
        max_pages: int = 20,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._file_store = file_store
        self._runner = JobRunner(
            store=store,
            extractor=extractor,
            analyzer=analyzer,
            file_store=file_store,
            save_result=self.save_final_result,
            fail_job=self.fail,
            max_pages=max_pages,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="analysis-job"
        )
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def submit(self, request: AnalysisRequest) -> str:
        """Create a pending job and schedule it. Returns the job id.

        A subject that already has a pending or processing job gets that
        job's id back instead of a second run.

        Raises:
            InvalidInputError: neither a document nor manual text was given.
            ExtractionError: the document is too small or not a document.
            DocumentNotFoundError: the document reference does not resolve.
        """
        if not request.has_input:
            raise InvalidInputError("Provide a documentRef or manualSummaryText")
        if request.document_ref:
            self._extractor.validate(self._file_store.load(request.document_ref))

        with self._lock:
            subject_key = request.subject_key
            if subject_key:
                existing = self._store.find_active_by_subject(subject_key)
                if existing is not None:
                    Log.info(f"Job {existing.id} already active, attaching", subject=subject_key)
                    return existing.id
            job = self._store.create(request)

        Log.stage(job.id, "submitted", subject=request.subject_id)
        self._dispatch(job.id, request)
        return job.id

    def get_status(self, job_id: str) -> AnalysisJob:
        job = self._store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def save_final_result(
        self,
        job_id: str,
        canonical_result: CanonicalResult,
        raw_result: Any = None,
    ) -> bool:
        """Persist the canonical result and complete the job. First call wins.

        Returns False, leaving the job untouched, when it is already terminal.
        """
        job = self.get_status(job_id)
        if job.status is JobStatus.COMPLETED:
            Log.info(f"Job {job_id} already completed, result kept")
            return False
        saved = self._store.mark_completed(
            job_id, canonical_result, raw_result, message="Analysis completed"
        )
        if saved:
            Log.stage(job_id, "completed", markers=len(canonical_result.markers))
        return saved

    def fail(self, job_id: str, kind: str, message: str) -> bool:
        """Record a failure kind and message. A completed job is left as is."""
        self.get_status(job_id)
        failed = self._store.mark_failed(job_id, kind, message)
        if failed:
            Log.stage(job_id, "failed", kind=kind)
        return failed

    def latest_result(self, subject_id: str) -> CanonicalResult | None:
        """Most recent completed result for a subject, served without a new AI call."""
        job = self._store.latest_completed_by_subject(subject_id)
        return job.canonical_result if job is not None else None

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _dispatch(self, job_id: str, request: AnalysisRequest) -> None:
        with self._lock:
            if job_id in self._in_flight:
                raise JobAlreadyRunningError(f"Job {job_id} is already running")
            self._in_flight.add(job_id)
        self._executor.submit(self._run, job_id, request)

    def _run(self, job_id: str, request: AnalysisRequest) -> None:
        try:
            self._runner.run(job_id, request)
        finally:
            with self._lock:
                self._in_flight.discard(job_id)


def build_job_store(settings: Settings) -> BaseJobStore:
    store = settings.job_store.lower()
    if store == "memory":
        return InMemoryJobStore()
    if store == "postgres":
        return PostgresJobRepository()
    raise ValueError(f"Unknown job store '{store}'. Choose from: ['memory', 'postgres']")


def build_controller(
    settings: Settings,
    store: BaseJobStore | None = None,
    analyzer: LabAnalyzer | None = None,
) -> AnalysisJobController:
    """Build a controller with all required adapters."""
    return AnalysisJobController(
        store=store if store is not None else build_job_store(settings),
        extractor=ExtractorFactory.create(settings),
        analyzer=analyzer if analyzer is not None else AnalyzerFactory.create(settings),
        file_store=FileStore(settings.files_root),
        max_workers=settings.job_worker_threads,
        max_pages=settings.analysis_max_pages,
    )
