import uuid
from typing import Any

import psycopg
import pytest

from labinsight.jobs.models import AnalysisRequest, JobStatus
from labinsight.normalization.models import CanonicalResult, Marker

RESULT = CanonicalResult(
    summary="Glucose is high",
    markers=[
        Marker(
            name="Glucose",
            value="105",
            unit="mg/dL",
            reference_range="70-99 mg/dL",
            interpretation="Slightly elevated",
        )
    ],
    recommendations=["Reduce sugar intake"],
)


def _subject() -> str:
    return f"subject-{uuid.uuid4().hex[:8]}"


@pytest.mark.integration
class TestCreateAndGet:
    def test_create_returns_pending_job(self, repository) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))

        assert job.status is JobStatus.PENDING
        assert job.progress == 0
        assert job.message == "Waiting to start"
        assert repository.get(job.id) == job

    def test_get_unknown(self, repository) -> None:
        assert repository.get("missing") is None


@pytest.mark.integration
class TestProgress:
    def test_progress_is_monotonic_and_capped(self, repository) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))
        repository.mark_processing(job.id, "Starting analysis")

        repository.update_progress(job.id, 60, total_pages=3, processed_pages=2)
        lowered = repository.update_progress(job.id, 30, processed_pages=1)
        capped = repository.update_progress(job.id, 100)

        assert lowered is not None
        assert (lowered.progress, lowered.total_pages, lowered.processed_pages) == (60, 3, 2)
        assert capped is not None
        assert capped.progress == 99
        assert capped.status is JobStatus.PROCESSING


@pytest.mark.integration
class TestTransitions:
    def test_complete_stores_canonical_result(
        self, repository, db_conn: psycopg.Connection[Any]
    ) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))
        repository.mark_processing(job.id)

        assert repository.mark_completed(job.id, RESULT, raw_result="raw text") is True

        done = repository.get(job.id)
        assert done is not None
        assert done.status is JobStatus.COMPLETED
        assert done.progress == 100
        assert done.canonical_result == RESULT
        assert done.raw_result == "raw text"
        with db_conn.cursor() as cur:
            cur.execute("SELECT canonical_result FROM analysis_jobs WHERE id = %s", (job.id,))
            row = cur.fetchone()
        assert row is not None
        assert row[0]["markers"][0]["referenceRange"] == "70-99 mg/dL"

    def test_second_completion_ignored(self, repository) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))
        repository.mark_processing(job.id)
        repository.mark_completed(job.id, RESULT)
        other = CanonicalResult(summary="other", recommendations=["Walk every day"])

        assert repository.mark_completed(job.id, other) is False
        assert repository.mark_failed(job.id, "unknown", "late") is False
        done = repository.get(job.id)
        assert done is not None
        assert done.canonical_result == RESULT

    def test_pending_job_cannot_complete(self, repository) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))

        assert repository.mark_completed(job.id, RESULT) is False

    def test_failed_job_is_terminal(self, repository) -> None:
        job = repository.create(AnalysisRequest(subject_id=_subject(), manual_summary_text="x"))
        repository.mark_processing(job.id)

        assert repository.mark_failed(job.id, "timeout", "too slow") is True
        repository.update_progress(job.id, 80)

        failed = repository.get(job.id)
        assert failed is not None
        assert failed.status is JobStatus.FAILED
        assert (failed.error_kind, failed.error) == ("timeout", "too slow")
        assert failed.progress == 0


@pytest.mark.integration
class TestSubjectQueries:
    def test_active_and_latest(self, repository) -> None:
        subject = _subject()
        first = repository.create(AnalysisRequest(subject_id=subject, manual_summary_text="x"))

        active = repository.find_active_by_subject(subject)
        assert active is not None and active.id == first.id

        repository.mark_processing(first.id)
        repository.mark_completed(first.id, RESULT)

        assert repository.find_active_by_subject(subject) is None
        latest = repository.latest_completed_by_subject(subject)
        assert latest is not None
        assert latest.id == first.id
        assert latest.canonical_result == RESULT

    def test_active_by_document_ref(self, repository) -> None:
        ref = uuid.uuid4().hex + ".pdf"
        job = repository.create(AnalysisRequest(document_ref=ref))

        active = repository.find_active_by_subject(ref)
        assert active is not None and active.id == job.id
