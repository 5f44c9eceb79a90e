"""Tests for ExampleClientAdapter (offline reference adapter)."""

import json

from labinsight.analysis.example_client_adapter import ExampleClientAdapter
from labinsight.normalization.normalizer import normalize


class TestExampleClientAdapter:
    def test_returns_canonical_json(self) -> None:
        result = ExampleClientAdapter().create_chat_completion(
            model="any",
            temperature=0.0,
            system_prompt="sys",
            user_prompt="user",
        )
        parsed = json.loads(result)
        assert parsed["outOfRange"] == []
        assert parsed["summary"].startswith("Offline example analysis")

    def test_output_normalizes_cleanly(self) -> None:
        raw = ExampleClientAdapter().create_chat_completion(
            model="x", temperature=0.1, system_prompt="", user_prompt=""
        )
        result = normalize(raw)
        assert result.markers == []
        assert result.recommendations == ExampleClientAdapter.RESPONSE["recommendations"]
