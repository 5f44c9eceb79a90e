from fastapi import APIRouter, Depends

from labinsight.api.dependencies import get_controller
from labinsight.api.schemas import (
    JobStatusResponse,
    SubmitAnalysisRequest,
    SubmitAnalysisResponse,
)
from labinsight.jobs.controller import AnalysisJobController
from labinsight.jobs.models import AnalysisRequest

router = APIRouter(tags=["analysis-jobs"])


@router.post("/analysis-jobs", response_model=SubmitAnalysisResponse, status_code=202)
def submit_analysis(
    body: SubmitAnalysisRequest,
    controller: AnalysisJobController = Depends(get_controller),
) -> SubmitAnalysisResponse:
    job_id = controller.submit(
        AnalysisRequest(
            subject_id=body.subject_id,
            document_ref=body.document_ref,
            manual_summary_text=body.manual_summary_text,
        )
    )
    return SubmitAnalysisResponse(job_id=job_id)


@router.get(
    "/analysis-jobs/{job_id}/status",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
def get_job_status(
    job_id: str,
    controller: AnalysisJobController = Depends(get_controller),
) -> JobStatusResponse:
    return JobStatusResponse.from_job(controller.get_status(job_id))
