from collections.abc import Callable
from typing import Any

from labinsight.analysis.analyzer import LabAnalyzer
from labinsight.analysis.exceptions import AnalysisError
from labinsight.documents.exceptions import DocumentError
from labinsight.documents.file_store import FileStore
from labinsight.extraction.exceptions import ExtractionError
from labinsight.extraction.extractor import DocumentExtractor
from labinsight.jobs.models import AnalysisRequest
from labinsight.jobs.store import BaseJobStore
from labinsight.logging.logger import Log
from labinsight.normalization.models import CanonicalResult
from labinsight.normalization.normalizer import normalize

PROGRESS_STARTED = 5
PROGRESS_EXTRACTED = 25
PROGRESS_ANALYZED = 95
PAGE_PROGRESS_SPAN = PROGRESS_ANALYZED - PROGRESS_EXTRACTED
UNKNOWN_ERROR_KIND = "unknown"

SaveResult = Callable[[str, CanonicalResult, Any], bool]
FailJob = Callable[[str, str, str], bool]


class JobRunner:
    """Run one analysis job: load -> extract -> analyze -> normalize -> persist.

    Any exception ends the job as failed with its kind and message recorded.
    """

    def __init__(
        self,
        store: BaseJobStore,
        extractor: DocumentExtractor,
        analyzer: LabAnalyzer,
        file_store: FileStore,
        save_result: SaveResult,
        fail_job: FailJob,
        max_pages: int = 20,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._analyzer = analyzer
        self._file_store = file_store
        self._save_result = save_result
        self._fail_job = fail_job
        self._max_pages = max_pages

    def run(self, job_id: str, request: AnalysisRequest) -> None:
        """Execute a single job with error handling."""
        if not self._store.mark_processing(job_id, "Starting analysis"):
            Log.warning(f"Job {job_id} is not pending, skipping run")
            return
        Log.stage(job_id, "processing", document=request.document_ref)
        self._store.update_progress(job_id, PROGRESS_STARTED)
        try:
            raw_result = self._analyze(job_id, request)
            self._store.update_progress(job_id, PROGRESS_ANALYZED, message="Saving results")
            canonical = normalize(raw_result)
            self._save_result(job_id, canonical, raw_result)
        except Exception as exc:
            self._handle_failure(job_id, exc)

    def _analyze(self, job_id: str, request: AnalysisRequest) -> Any:
        if not request.document_ref:
            self._progress(job_id, PROGRESS_EXTRACTED, "Analyzing summary text", total=1)
            raw = self._analyzer.analyze_text(request.manual_summary_text or "")
            self._progress(job_id, PROGRESS_ANALYZED, "Analysis received", total=1, done=1)
            return raw

        self._progress(job_id, PROGRESS_STARTED, "Loading document")
        data = self._file_store.load(request.document_ref)
        kind = self._extractor.validate(data)
        if kind.is_image:
            self._progress(job_id, PROGRESS_EXTRACTED, "Analyzing image", total=1)
            raw = self._analyzer.analyze_image(data, kind.mime_type)
            self._progress(job_id, PROGRESS_ANALYZED, "Analysis received", total=1, done=1)
            return raw

        self._progress(job_id, PROGRESS_STARTED, "Extracting text")
        document = self._extractor.extract(data)
        pages = document.pages
        if len(pages) > self._max_pages:
            Log.warning(
                f"Job {job_id}: analyzing the first {self._max_pages} of {len(pages)} pages"
            )
            pages = pages[: self._max_pages]
        total = len(pages)
        self._progress(job_id, PROGRESS_EXTRACTED, "Text extracted", total=total)

        if total == 1:
            raw = self._analyzer.analyze_text(pages[0].raw_text)
            self._progress(job_id, PROGRESS_ANALYZED, "Analysis received", total=1, done=1)
            return raw
        return self._analyze_pages(job_id, [(page.index, page.raw_text) for page in pages])

    def _analyze_pages(self, job_id: str, pages: list[tuple[int, str]]) -> list[dict[str, Any]]:
        """Analyze page by page; a failed page is skipped unless every page fails."""
        total = len(pages)
        results: list[dict[str, Any]] = []
        last_error: AnalysisError | None = None
        for position, (page_number, text) in enumerate(pages, start=1):
            self._progress(job_id, 0, f"Analyzing page {position} of {total}", total=total)
            try:
                raw = self._analyzer.analyze_text(text, page_number=position, total_pages=total)
                results.append({"page": page_number, "analysis": raw})
            except AnalysisError as exc:
                last_error = exc
                Log.warning(f"Job {job_id}: page {page_number} skipped", kind=exc.kind.value)
            self._progress(
                job_id,
                PROGRESS_EXTRACTED + PAGE_PROGRESS_SPAN * position // total,
                None,
                total=total,
                done=position,
            )
        if not results and last_error is not None:
            raise last_error
        return results

    def _progress(
        self,
        job_id: str,
        progress: int,
        message: str | None,
        total: int | None = None,
        done: int | None = None,
    ) -> None:
        # Progress only moves forward; 0 updates the message and page counts alone.
        self._store.update_progress(
            job_id,
            progress,
            message=message,
            total_pages=total,
            processed_pages=done,
        )

    def _handle_failure(self, job_id: str, exc: Exception) -> None:
        if isinstance(exc, (ExtractionError, AnalysisError)):
            kind, message = exc.kind.value, exc.message
            Log.error(f"Job {job_id} failed: {exc}", kind=kind)
        elif isinstance(exc, DocumentError):
            kind, message = "document_unavailable", str(exc)
            Log.error(f"Job {job_id} failed: {exc}", kind=kind)
        else:
            kind, message = UNKNOWN_ERROR_KIND, f"Unexpected error: {exc}"
            Log.error(f"Job {job_id} failed with unexpected error: {exc!r}", kind=kind)
        self._fail_job(job_id, kind, message)
