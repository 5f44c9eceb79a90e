"""Classification of raw AI output into a closed set of payload variants.

AI responses arrive in many shapes: plain prose, JSON strings wrapped in
Markdown fences, JSON embedded in prose, nested envelopes left behind by
earlier persistence layers, and arrays of per-page results. ``classify``
decodes and unwraps the raw value, then picks the first matching entry of
``SHAPE_DETECTORS``.
"""

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

MAX_ENVELOPE_DEPTH = 4

# Priority order; the first envelope present wins at each level.
ENVELOPE_PATHS: tuple[tuple[str, ...], ...] = (
    ("lab_results",),
    ("data", "analyzed_data"),
    ("data",),
    ("analysis",),
    ("analyzed_data",),
    ("analysisResults",),
)

_FENCE = re.compile(r"^```[A-Za-z0-9_-]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)
_EMBEDDED_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class EmptyPayload:
    """Nothing usable: None, empty containers, blank strings."""


@dataclass(frozen=True)
class TextPayload:
    """Free text that is not JSON."""

    text: str


@dataclass(frozen=True)
class PageListPayload:
    """An ordered list of per-page results from a multi-page document."""

    pages: list[Any]


@dataclass(frozen=True)
class CanonicalPayload:
    """A mapping that already carries summary, a marker list and a recommendation list."""

    data: dict[str, Any]


@dataclass(frozen=True)
class FieldwisePayload:
    """Any other mapping; fields are recovered one by one."""

    data: dict[str, Any]


Payload = EmptyPayload | TextPayload | PageListPayload | CanonicalPayload | FieldwisePayload


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return not (value.strip() if isinstance(value, str) else value)
    return False


def _is_canonical(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    has_markers = isinstance(value.get("outOfRange"), list) or isinstance(
        value.get("markers"), list
    )
    return (
        isinstance(value.get("summary"), str)
        and has_markers
        and isinstance(value.get("recommendations"), list)
    )


SHAPE_DETECTORS: tuple[tuple[str, Callable[[Any], bool], Callable[[Any], Payload]], ...] = (
    ("empty", _is_empty, lambda value: EmptyPayload()),
    ("text", lambda value: isinstance(value, str), lambda value: TextPayload(value)),
    ("page_list", lambda value: isinstance(value, list), lambda value: PageListPayload(value)),
    ("canonical", _is_canonical, lambda value: CanonicalPayload(value)),
    ("fieldwise", lambda value: isinstance(value, dict), lambda value: FieldwisePayload(value)),
    # Bare numbers and booleans carry no analysis.
    ("scalar", lambda value: True, lambda value: EmptyPayload()),
)


def decode_json_text(text: str) -> Any:
    """Decode JSON from AI text output; return the stripped text if it is not JSON.

    Tries, in order: the whole text, the text inside Markdown code fences,
    and the first ``{...}`` block embedded in prose.
    """
    cleaned = text.strip()
    fenced = _FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    candidates = [cleaned]
    embedded = _EMBEDDED_OBJECT.search(cleaned)
    if embedded and embedded.group(0) != cleaned:
        candidates.append(embedded.group(0))

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue
    return cleaned


def decode(raw: Any) -> Any:
    """Decode string input, including JSON that was encoded twice."""
    value = raw
    for _ in range(2):
        if not isinstance(value, str):
            break
        decoded = decode_json_text(value)
        if decoded == value.strip():
            return decoded
        value = decoded
    return value


def _lookup(value: dict[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = value
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def _envelope_content(candidate: Any) -> Any:
    """Return the container an envelope holds, decoding string-encoded JSON."""
    if isinstance(candidate, str):
        decoded = decode_json_text(candidate)
        candidate = decoded if isinstance(decoded, (dict, list)) else None
    if isinstance(candidate, (dict, list)) and candidate:
        return candidate
    return None


def unwrap(value: Any) -> Any:
    """Strip nested envelopes, at most ``MAX_ENVELOPE_DEPTH`` levels."""
    for _ in range(MAX_ENVELOPE_DEPTH):
        if not isinstance(value, dict):
            return value
        for path in ENVELOPE_PATHS:
            content = _envelope_content(_lookup(value, path))
            if content is not None:
                value = content
                break
        else:
            return value
    return value


def detect(value: Any) -> Payload:
    """Apply ``SHAPE_DETECTORS`` to an already decoded and unwrapped value."""
    for _name, matches, build in SHAPE_DETECTORS:
        if matches(value):
            return build(value)
    return EmptyPayload()


def classify(raw: Any) -> Payload:
    return detect(unwrap(decode(raw)))
