from unittest.mock import MagicMock

import pytest

from labinsight.analysis.analyzer import LabAnalyzer
from labinsight.analysis.client_base import BaseAnalysisClient, ImageInput
from labinsight.analysis.exceptions import AnalysisError, AnalysisErrorKind


def _make_analyzer(temperature: float = 0.2) -> tuple[LabAnalyzer, MagicMock]:
    client = MagicMock(spec=BaseAnalysisClient)
    client.create_chat_completion.return_value = '{"summary": "ok"}'
    return LabAnalyzer(client=client, model="gpt-test", temperature=temperature), client


class TestAnalyzeText:
    def test_returns_raw_client_output(self) -> None:
        analyzer, _client = _make_analyzer()
        assert analyzer.analyze_text("Glucose 105") == '{"summary": "ok"}'

    def test_prompt_contains_document_text(self) -> None:
        analyzer, client = _make_analyzer()
        analyzer.analyze_text("Glucose 105 mg/dL")
        kwargs = client.create_chat_completion.call_args.kwargs
        assert "Glucose 105 mg/dL" in kwargs["user_prompt"]
        assert kwargs["model"] == "gpt-test"
        assert kwargs["image"] is None

    def test_single_page_has_no_page_context(self) -> None:
        analyzer, client = _make_analyzer()
        analyzer.analyze_text("text")
        assert "page 1 of" not in client.create_chat_completion.call_args.kwargs["user_prompt"]

    def test_multi_page_prompt_states_page_position(self) -> None:
        analyzer, client = _make_analyzer()
        analyzer.analyze_text("text", page_number=2, total_pages=5)
        assert "page 2 of 5" in client.create_chat_completion.call_args.kwargs["user_prompt"]

    def test_temperature_clamped(self) -> None:
        analyzer, client = _make_analyzer(temperature=3.0)
        analyzer.analyze_text("text")
        assert client.create_chat_completion.call_args.kwargs["temperature"] == 1.0

    def test_client_errors_propagate(self) -> None:
        analyzer, client = _make_analyzer()
        client.create_chat_completion.side_effect = AnalysisError(
            AnalysisErrorKind.UPSTREAM_UNAVAILABLE
        )
        with pytest.raises(AnalysisError):
            analyzer.analyze_text("text")


class TestAnalyzeImage:
    def test_sends_image(self) -> None:
        analyzer, client = _make_analyzer()
        analyzer.analyze_image(b"\xff\xd8\xff", "image/jpeg")
        image = client.create_chat_completion.call_args.kwargs["image"]
        assert image == ImageInput(data=b"\xff\xd8\xff", mime_type="image/jpeg")
