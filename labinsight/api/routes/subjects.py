from fastapi import APIRouter, Depends, HTTPException

from labinsight.api.dependencies import get_controller
from labinsight.api.schemas import SubjectAnalysisResponse
from labinsight.jobs.controller import AnalysisJobController

router = APIRouter(tags=["subjects"])


@router.get("/subjects/{subject_id}/analysis", response_model=SubjectAnalysisResponse)
def get_latest_analysis(
    subject_id: str,
    controller: AnalysisJobController = Depends(get_controller),
) -> SubjectAnalysisResponse:
    """Serve the most recent completed analysis without running the AI again."""
    result = controller.latest_result(subject_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No completed analysis for {subject_id}")
    return SubjectAnalysisResponse(subject_id=subject_id, data=result.to_dict())
