import json
import uuid
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from labinsight.config.settings import Settings
from labinsight.jobs.controller import build_controller
from labinsight.jobs.models import AnalysisRequest, JobStatus

RAW = json.dumps(
    {
        "summary": "Three values are outside the reference range.",
        "outOfRange": [
            {"name": "Glucose", "value": "105", "unit": "mg/dL", "referenceRange": "70-99"},
            {"name": "Total Cholesterol", "value": "215", "unit": "mg/dL"},
            {"name": "Vitamin D", "value": "19", "unit": "ng/mL"},
        ],
        "recommendations": ["Reduce refined sugar intake"],
    }
)


@pytest.mark.integration
class TestControllerWithPostgres:
    def test_pdf_job_end_to_end(
        self,
        repository,
        test_settings: Settings,
        tmp_path: Path,
        lab_report_pdf_bytes: bytes,
    ) -> None:
        settings = test_settings.model_copy(update={"files_root": tmp_path})
        analyzer = MagicMock()
        analyzer.analyze_text.return_value = RAW
        controller = build_controller(settings, store=repository, analyzer=analyzer)
        ref = f"{'a' * 32}.pdf"
        (tmp_path / ref).write_bytes(lab_report_pdf_bytes)

        subject_id = f"integration-{uuid.uuid4().hex[:8]}"
        job_id = controller.submit(AnalysisRequest(subject_id=subject_id, document_ref=ref))
        controller.shutdown(wait=True)

        job = controller.get_status(job_id)
        assert job.status is JobStatus.COMPLETED
        assert job.progress == 100
        assert job.canonical_result is not None
        assert [m.name for m in job.canonical_result.markers] == [
            "Glucose",
            "Total Cholesterol",
            "Vitamin D",
        ]
        prompt_text = analyzer.analyze_text.call_args.args[0]
        assert "Glucose 105" in prompt_text
