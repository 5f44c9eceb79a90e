from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from labinsight.jobs.models import AnalysisJob, JobStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitAnalysisRequest(CamelModel):
    document_ref: str | None = None
    manual_summary_text: str | None = None
    subject_id: str | None = None


class SubmitAnalysisResponse(CamelModel):
    job_id: str


class JobStatusResponse(CamelModel):
    status: JobStatus
    progress: int
    is_processing: bool
    data: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None
    error_kind: str | None = None
    total_pages: int = 0
    processed_pages: int = 0

    @classmethod
    def from_job(cls, job: AnalysisJob) -> "JobStatusResponse":
        completed = job.status is JobStatus.COMPLETED and job.canonical_result is not None
        return cls(
            status=job.status,
            progress=job.progress,
            is_processing=job.is_processing,
            data=job.canonical_result.to_dict() if completed else None,
            message=job.message,
            error=job.error,
            error_kind=job.error_kind,
            total_pages=job.total_pages,
            processed_pages=job.processed_pages,
        )


class UploadResponse(CamelModel):
    document_ref: str
    mime_type: str
    size_bytes: int


class SubjectAnalysisResponse(CamelModel):
    subject_id: str
    data: dict[str, Any]
