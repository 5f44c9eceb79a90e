"""Field recovery, cleanup and finalization shared by the normalizer and aggregator."""

import json
import re
from collections.abc import Iterable
from typing import Any

from labinsight.normalization import defaults
from labinsight.normalization.models import (
    CanonicalResult,
    Marker,
    PageSummary,
    PartialResult,
)
from labinsight.normalization.shapes import (
    CanonicalPayload,
    EmptyPayload,
    FieldwisePayload,
    PageListPayload,
    Payload,
    TextPayload,
)

MIN_RECOMMENDATION_CHARS = 5

SUMMARY_FIELDS = ("summary", "description", "analysis", "overview", "text", "content")
MARKER_NAME_FIELDS = ("name", "marker", "test", "parameter")
MARKER_VALUE_FIELDS = ("value", "result")
MARKER_REFERENCE_FIELDS = ("referenceRange", "reference", "reference_range", "range")
MARKER_INTERPRETATION_FIELDS = ("interpretation", "significance", "comment")
RECOMMENDATION_TEXT_FIELDS = ("text", "description", "recommendation", "title")
ABNORMAL_FLAGS = frozenset(
    {"high", "low", "abnormal", "out_of_range", "out-of-range", "out of range", "critical"}
)

_NUMBER = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
_BOUND = re.compile(r"^\s*(<=?|>=?|≤|≥)\s*([-+]?\d+(?:[.,]\d+)?)")
_INTERVAL = re.compile(
    r"([-+]?\d+(?:[.,]\d+)?)\s*(?:-|–|to)\s*([-+]?\d+(?:[.,]\d+)?)", re.IGNORECASE
)


def _text(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return ""


def _first_text(item: dict[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        text = _text(item.get(key))
        if text:
            return text
    return ""


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _NUMBER.search(value)
        if match:
            return float(match.group(0).replace(",", "."))
    return None


# -- reference ranges ------------------------------------------------------


def parse_range(reference: Any) -> tuple[float | None, float | None]:
    """Return ``(low, high)`` bounds from a range object or string."""
    if isinstance(reference, dict):
        return _number(reference.get("min")), _number(reference.get("max"))
    if not isinstance(reference, str):
        return None, None
    bound = _BOUND.match(reference)
    if bound:
        operator, number = bound.group(1), float(bound.group(2).replace(",", "."))
        if operator in ("<", "<=", "≤"):
            return None, number
        return number, None
    interval = _INTERVAL.search(reference)
    if interval:
        low = float(interval.group(1).replace(",", "."))
        high = float(interval.group(2).replace(",", "."))
        return low, high
    return None, None


def _reference_of(item: dict[str, Any]) -> Any:
    for key in MARKER_REFERENCE_FIELDS:
        if item.get(key) not in (None, "", {}):
            return item[key]
    return None


def _reference_text(reference: Any, unit: str) -> str:
    if isinstance(reference, dict):
        low, high = parse_range(reference)
        unit = _text(reference.get("unit")) or unit
        suffix = f" {unit}" if unit else ""
        if low is not None and high is not None:
            return f"{low:g}-{high:g}{suffix}"
        if high is not None:
            return f"<{high:g}{suffix}"
        if low is not None:
            return f">{low:g}{suffix}"
        return ""
    return _text(reference)


def is_outside_range(item: dict[str, Any]) -> bool:
    """True when a numeric result falls outside its provided reference range."""
    status = _text(item.get("status")).lower()
    if status in ABNORMAL_FLAGS:
        return True
    value = _number(item.get("value", item.get("result")))
    if value is None:
        return False
    low, high = parse_range(_reference_of(item))
    if low is not None and value < low:
        return True
    return high is not None and value > high


def is_flagged(item: dict[str, Any]) -> bool:
    if item.get("outOfRange") is True:
        return True
    flag = _text(item.get("status")) or _text(item.get("flag"))
    return flag.lower() in ABNORMAL_FLAGS


# -- markers ---------------------------------------------------------------


def clean_marker(item: Any) -> Marker | None:
    """Build a marker with every field filled; items without a name are dropped."""
    if not isinstance(item, dict):
        return None
    name = _first_text(item, MARKER_NAME_FIELDS)
    if not name:
        return None
    unit = _text(item.get("unit"))
    reference = _reference_text(_reference_of(item), unit)
    placeholders = defaults.MARKER_PLACEHOLDERS
    return Marker(
        name=name,
        value=_first_text(item, MARKER_VALUE_FIELDS) or placeholders["value"],
        unit=unit or placeholders["unit"],
        reference_range=reference or placeholders["reference_range"],
        interpretation=(
            _first_text(item, MARKER_INTERPRETATION_FIELDS) or placeholders["interpretation"]
        ),
    )


def clean_markers(items: Iterable[Any]) -> list[Marker]:
    return [marker for marker in map(clean_marker, items) if marker is not None]


def dedupe_markers(markers: Iterable[Marker]) -> list[Marker]:
    """Keep the first marker seen for each exact name."""
    seen: set[str] = set()
    unique: list[Marker] = []
    for marker in markers:
        if marker.name in seen:
            continue
        seen.add(marker.name)
        unique.append(marker)
    return unique


def markers_from(data: dict[str, Any]) -> list[Marker]:
    if isinstance(data.get("outOfRange"), list):
        return clean_markers(data["outOfRange"])
    if isinstance(data.get("markers"), list):
        return clean_markers(
            m for m in data["markers"] if isinstance(m, dict) and is_flagged(m)
        )
    if isinstance(data.get("results"), list):
        return clean_markers(
            r for r in data["results"] if isinstance(r, dict) and is_outside_range(r)
        )
    return []


# -- recommendations -------------------------------------------------------


def coerce_recommendation(item: Any) -> str | None:
    if isinstance(item, str):
        return item.strip() or None
    if isinstance(item, dict):
        text = _first_text(item, RECOMMENDATION_TEXT_FIELDS)
        return text or json.dumps(item, ensure_ascii=False)
    return None


def _coerce_all(items: Iterable[Any]) -> list[str]:
    return [text for text in map(coerce_recommendation, items) if text]


def recommendations_from(data: dict[str, Any]) -> list[str]:
    recommendations = data.get("recommendations")
    if isinstance(recommendations, list):
        return _coerce_all(recommendations)
    if isinstance(recommendations, dict):
        return [
            f"{key}: {value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)}"
            for key, value in recommendations.items()
        ]
    for key in ("actions", "interventions"):
        actions = data.get(key)
        if isinstance(actions, list):
            return _coerce_all(actions)
        if isinstance(actions, str) and actions.strip():
            return [actions.strip()]
    return []


def clean_recommendations(recommendations: Iterable[str]) -> list[str]:
    """Drop entries of five characters or fewer and exact duplicates, keeping order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for text in recommendations:
        text = text.strip()
        if len(text) <= MIN_RECOMMENDATION_CHARS or text in seen:
            continue
        seen.add(text)
        cleaned.append(text)
    return cleaned


# -- summary and pages -----------------------------------------------------


def summary_from(data: dict[str, Any]) -> str:
    for key in SUMMARY_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            if key in ("text", "content"):
                return defaults.truncate(value)
            return value.strip()
        if isinstance(value, (dict, list)) and value and key in ("analysis", "overview"):
            return json.dumps(value, ensure_ascii=False)
    return ""


def page_number_of(item: Any, position: int) -> int:
    if isinstance(item, dict):
        for key in ("pageNumber", "page", "page_number"):
            number = item.get(key)
            if isinstance(number, int) and not isinstance(number, bool) and number > 0:
                return number
    return position


def pages_from(data: dict[str, Any]) -> list[PageSummary] | None:
    pages = data.get("pages")
    if not isinstance(pages, list) or not pages:
        return None
    return [
        PageSummary(
            page_number=page_number_of(page, position),
            summary=_text(page.get("summary")) if isinstance(page, dict) else "",
        )
        for position, page in enumerate(pages, start=1)
    ]


# -- payload to partial ----------------------------------------------------


def partial_from(payload: Payload) -> PartialResult:
    """Recover fields from a single-page payload without applying defaults."""
    match payload:
        case EmptyPayload():
            return PartialResult()
        case TextPayload(text=text):
            return PartialResult(
                summary=defaults.truncate(text),
                recommendations=[defaults.TEXT_RESPONSE_RECOMMENDATION],
            )
        case CanonicalPayload(data=data):
            markers = data["outOfRange"] if isinstance(data.get("outOfRange"), list) else data["markers"]
            return PartialResult(
                summary=_text(data["summary"]),
                markers=clean_markers(markers),
                recommendations=_coerce_all(data["recommendations"]),
                pages=pages_from(data),
            )
        case FieldwisePayload(data=data):
            return PartialResult(
                summary=summary_from(data),
                markers=markers_from(data),
                recommendations=recommendations_from(data),
                pages=pages_from(data),
            )
        case PageListPayload():
            raise TypeError("page lists are merged by the aggregator")
    return PartialResult()


# -- finalization ----------------------------------------------------------


def finalize(partial: PartialResult, is_demo: bool = False) -> CanonicalResult:
    """Apply dedup, filtering and non-emptiness guarantees."""
    markers = dedupe_markers(partial.markers)
    recommendations = clean_recommendations(partial.recommendations)
    if not recommendations:
        fallback = (
            defaults.MARKER_RECOMMENDATIONS if markers else defaults.WELLNESS_RECOMMENDATIONS
        )
        recommendations = list(fallback)

    summary = partial.summary.strip()
    if not summary:
        summary = defaults.marker_summary(len(markers)) if markers else defaults.GENERIC_SUMMARY

    return CanonicalResult(
        summary=summary,
        markers=markers,
        recommendations=recommendations,
        pages=partial.pages,
        is_demo=is_demo,
    )
