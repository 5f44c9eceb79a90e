import logging

import pytest

from labinsight.logging.logger import Log


class TestLogRender:
    def test_message_without_context(self) -> None:
        assert Log._render("hello", {}) == "hello"

    def test_context_rendered_as_key_value(self) -> None:
        assert Log._render("done", {"kind": "timeout", "pages": 3}) == "done | kind=timeout pages=3"

    def test_none_values_skipped(self) -> None:
        assert Log._render("done", {"kind": None}) == "done"


class TestLogStage:
    def test_stage_logs_job_event(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="labinsight"):
            Log.stage("abc", "completed", markers=2)
        assert "Job abc completed | markers=2" in caplog.text
