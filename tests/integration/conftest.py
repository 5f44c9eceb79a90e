import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from labinsight.config.settings import Settings
from labinsight.database.connection import close_pool, get_connection, init_pool
from labinsight.database.migrations import apply_schema
from labinsight.database.repositories.job_repository import PostgresJobRepository
from labinsight.jobs.models import AnalysisJob, AnalysisRequest


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "labinsight_test")
    return Settings(job_store="postgres")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    job_ids: list[str] = []
    yield job_ids
    if not job_ids:
        return
    with get_connection() as conn:
        conn.execute("DELETE FROM analysis_jobs WHERE id = ANY(%s)", (job_ids,))
        conn.commit()


class TrackingRepository(PostgresJobRepository):
    """Records created job ids so the cleanup fixture can delete them."""

    def __init__(self, created: list[str]) -> None:
        self.created = created

    def create(self, request: AnalysisRequest) -> AnalysisJob:
        job = super().create(request)
        self.created.append(job.id)
        return job


@pytest.fixture
def repository(integration_cleanup: list[str]) -> TrackingRepository:
    return TrackingRepository(integration_cleanup)
