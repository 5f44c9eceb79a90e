import uuid
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from labinsight.database.connection import get_connection
from labinsight.jobs.exceptions import JobError
from labinsight.jobs.models import AnalysisJob, AnalysisRequest, JobStatus
from labinsight.jobs.store import BaseJobStore, clamp_progress
from labinsight.logging.logger import Log
from labinsight.normalization.models import CanonicalResult
from labinsight.normalization.normalizer import normalize

_COLUMNS = """
    id, subject_id, document_ref, status, progress, total_pages, processed_pages,
    message, raw_result, canonical_result, error_kind, error_message,
    created_at, updated_at
"""


def _row_to_job(row: dict[str, Any]) -> AnalysisJob:
    canonical = row["canonical_result"]
    return AnalysisJob(
        id=row["id"],
        subject_id=row["subject_id"],
        document_ref=row["document_ref"],
        status=JobStatus(row["status"]),
        progress=row["progress"],
        total_pages=row["total_pages"],
        processed_pages=row["processed_pages"],
        message=row["message"],
        raw_result=row["raw_result"],
        # Stored canonical dicts pass through the normalizer unchanged.
        canonical_result=normalize(canonical) if canonical is not None else None,
        error_kind=row["error_kind"],
        error=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresJobRepository(BaseJobStore):
    """Database operations for the analysis_jobs table.

    Forward-only rules live in the SQL: ``GREATEST`` keeps progress
    monotonic and every transition is guarded by the current status.
    """

    def create(self, request: AnalysisRequest) -> AnalysisJob:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO analysis_jobs (id, subject_id, document_ref, status, message)
                    VALUES (%s, %s, %s, 'pending', 'Waiting to start')
                    RETURNING {_COLUMNS}
                    """,
                    (uuid.uuid4().hex, request.subject_id, request.document_ref),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise JobError("Job insert returned no row")
        return _row_to_job(row)

    def get(self, job_id: str) -> AnalysisJob | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM analysis_jobs WHERE id = %s", (job_id,))

    def mark_processing(self, job_id: str, message: str | None = None) -> bool:
        return self._execute_guarded(
            """
            UPDATE analysis_jobs
            SET status = 'processing', message = COALESCE(%s, message), updated_at = NOW()
            WHERE id = %s AND status = 'pending'
            """,
            (message, job_id),
        )

    def update_progress(
        self,
        job_id: str,
        progress: int,
        *,
        message: str | None = None,
        total_pages: int | None = None,
        processed_pages: int | None = None,
    ) -> AnalysisJob | None:
        self._execute_guarded(
            """
            UPDATE analysis_jobs
            SET progress = GREATEST(progress, %s),
                message = COALESCE(%s, message),
                total_pages = COALESCE(%s, total_pages),
                processed_pages = GREATEST(processed_pages, COALESCE(%s, 0)),
                updated_at = NOW()
            WHERE id = %s AND status IN ('pending', 'processing')
            """,
            (clamp_progress(progress), message, total_pages, processed_pages, job_id),
        )
        return self.get(job_id)

    def mark_completed(
        self,
        job_id: str,
        canonical_result: CanonicalResult,
        raw_result: Any = None,
        message: str | None = None,
    ) -> bool:
        return self._execute_guarded(
            """
            UPDATE analysis_jobs
            SET status = 'completed', progress = 100,
                canonical_result = %s, raw_result = %s,
                message = COALESCE(%s, message), updated_at = NOW()
            WHERE id = %s AND status = 'processing'
            """,
            (
                Jsonb(canonical_result.to_dict()),
                Jsonb(raw_result) if raw_result is not None else None,
                message,
                job_id,
            ),
        )

    def mark_failed(self, job_id: str, error_kind: str, error: str) -> bool:
        return self._execute_guarded(
            """
            UPDATE analysis_jobs
            SET status = 'failed', error_kind = %s, error_message = %s,
                message = %s, updated_at = NOW()
            WHERE id = %s AND status IN ('pending', 'processing')
            """,
            (error_kind, error, error, job_id),
        )

    def find_active_by_subject(self, subject_key: str) -> AnalysisJob | None:
        return self._fetch_one(
            f"""
            SELECT {_COLUMNS} FROM analysis_jobs
            WHERE (subject_id = %s OR document_ref = %s)
              AND status IN ('pending', 'processing')
            ORDER BY created_at
            LIMIT 1
            """,
            (subject_key, subject_key),
        )

    def latest_completed_by_subject(self, subject_id: str) -> AnalysisJob | None:
        return self._fetch_one(
            f"""
            SELECT {_COLUMNS} FROM analysis_jobs
            WHERE subject_id = %s AND status = 'completed'
            ORDER BY updated_at DESC
            LIMIT 1
            """,
            (subject_id,),
        )

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> AnalysisJob | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        return _row_to_job(row) if row is not None else None

    def _execute_guarded(self, query: str, params: tuple[Any, ...]) -> bool:
        """Run a status-guarded UPDATE; True when a row changed."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                changed = cur.rowcount == 1
            conn.commit()
        if not changed:
            Log.debug(f"Guarded update matched no row for job {params[-1]}")
        return changed
