import json

import pytest

from labinsight.normalization.shapes import (
    ENVELOPE_PATHS,
    SHAPE_DETECTORS,
    CanonicalPayload,
    EmptyPayload,
    FieldwisePayload,
    PageListPayload,
    TextPayload,
    classify,
    decode,
    decode_json_text,
    detect,
    unwrap,
)

CANONICAL = {"summary": "ok", "outOfRange": [], "recommendations": []}


class TestDecodeJsonText:
    def test_plain_json(self) -> None:
        assert decode_json_text('{"a": 1}') == {"a": 1}

    def test_fenced_json(self) -> None:
        assert decode_json_text('```json\n{"a": 1}\n```') == {"a": 1}

    def test_fence_without_language(self) -> None:
        assert decode_json_text('```\n[1, 2]\n```') == [1, 2]

    def test_json_embedded_in_prose(self) -> None:
        text = 'Here is the analysis: {"summary": "ok"} Let me know.'
        assert decode_json_text(text) == {"summary": "ok"}

    def test_non_json_returns_stripped_text(self) -> None:
        assert decode_json_text("  Glucose is high.  ") == "Glucose is high."

    def test_broken_braces_return_text(self) -> None:
        assert decode_json_text("{not json}") == "{not json}"


class TestDecode:
    def test_non_string_passes_through(self) -> None:
        assert decode({"a": 1}) == {"a": 1}

    def test_double_encoded_json(self) -> None:
        raw = json.dumps(json.dumps({"summary": "ok"}))
        assert decode(raw) == {"summary": "ok"}

    def test_plain_text(self) -> None:
        assert decode("hello") == "hello"


class TestUnwrap:
    def test_envelope_priority_order(self) -> None:
        assert ENVELOPE_PATHS[0] == ("lab_results",)
        assert ENVELOPE_PATHS.index(("data", "analyzed_data")) < ENVELOPE_PATHS.index(("data",))

    def test_data_analyzed_data(self) -> None:
        assert unwrap({"data": {"analyzed_data": CANONICAL}}) == CANONICAL

    def test_repeated_envelopes(self) -> None:
        assert unwrap({"lab_results": {"analyzed_data": CANONICAL}}) == CANONICAL

    def test_string_encoded_envelope(self) -> None:
        assert unwrap({"analysis": json.dumps(CANONICAL)}) == CANONICAL

    def test_prose_analysis_is_not_an_envelope(self) -> None:
        value = {"analysis": "Everything looks normal."}
        assert unwrap(value) == value

    def test_empty_envelope_is_skipped(self) -> None:
        value = {"data": {}, "summary": "x"}
        assert unwrap(value) == value

    def test_analysis_results_page_list(self) -> None:
        assert unwrap({"analysisResults": [CANONICAL]}) == [CANONICAL]

    def test_depth_is_bounded(self) -> None:
        value: dict[str, object] = {"summary": "deep"}
        for _ in range(6):
            value = {"data": value}
        assert unwrap(value) == {"data": {"data": {"summary": "deep"}}}


class TestDetect:
    def test_detector_order(self) -> None:
        names = [name for name, _matches, _build in SHAPE_DETECTORS]
        assert names == ["empty", "text", "page_list", "canonical", "fieldwise", "scalar"]

    @pytest.mark.parametrize("value", [None, "", "   ", [], {}, 42, True])
    def test_empty_like_values(self, value: object) -> None:
        assert isinstance(detect(value), EmptyPayload)

    def test_text(self) -> None:
        assert detect("prose") == TextPayload("prose")

    def test_page_list(self) -> None:
        assert isinstance(detect([CANONICAL]), PageListPayload)

    def test_canonical(self) -> None:
        assert isinstance(detect(CANONICAL), CanonicalPayload)

    def test_canonical_with_markers_key(self) -> None:
        value = {"summary": "s", "markers": [], "recommendations": []}
        assert isinstance(detect(value), CanonicalPayload)

    def test_partial_mapping_is_fieldwise(self) -> None:
        assert isinstance(detect({"summary": "s"}), FieldwisePayload)


class TestClassify:
    def test_fenced_nested_envelope(self) -> None:
        raw = "```json\n" + json.dumps({"data": {"analyzed_data": CANONICAL}}) + "\n```"
        assert classify(raw) == CanonicalPayload(CANONICAL)
