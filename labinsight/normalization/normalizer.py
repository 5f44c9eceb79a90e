"""Total conversion of arbitrary AI output into a ``CanonicalResult``."""

from typing import Any

from labinsight.logging.logger import Log
from labinsight.normalization.aggregator import aggregate
from labinsight.normalization.fields import finalize, partial_from
from labinsight.normalization.models import CanonicalResult, PartialResult
from labinsight.normalization.shapes import (
    CanonicalPayload,
    EmptyPayload,
    FieldwisePayload,
    PageListPayload,
    Payload,
    TextPayload,
    classify,
)


def _normalize_payload(payload: Payload) -> CanonicalResult:
    match payload:
        case PageListPayload(pages=pages):
            return aggregate(pages)
        case TextPayload() | CanonicalPayload() | FieldwisePayload() | EmptyPayload():
            return finalize(partial_from(payload))
    return finalize(PartialResult())


def normalize(raw: Any) -> CanonicalResult:
    """Normalize any AI output. Never raises; degrades to default content."""
    try:
        payload = classify(raw)
        Log.debug(f"Normalizing {type(payload).__name__}")
        return _normalize_payload(payload)
    except Exception as exc:
        Log.error(f"Normalization fell back to defaults: {exc}")
        return finalize(PartialResult())
