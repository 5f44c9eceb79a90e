"""Merges per-page analysis results of a multi-page document into one canonical result."""

from collections.abc import Iterator, Sequence
from typing import Any

from labinsight.logging.logger import Log
from labinsight.normalization import defaults
from labinsight.normalization.fields import finalize, page_number_of, partial_from
from labinsight.normalization.models import CanonicalResult, PageSummary, PartialResult
from labinsight.normalization.shapes import PageListPayload, Payload, classify

MIN_PAGE_SUMMARY_CHARS = 10
STANDALONE_SUMMARY_CHARS = 50
JOINABLE_SUMMARY_CHARS = 30
MAX_JOINED_SUMMARIES = 3
MAX_NESTING = 2


def _flatten(page_results: Sequence[Any], depth: int = 0) -> Iterator[tuple[Any, Payload]]:
    for item in page_results:
        payload = classify(item)
        if not isinstance(payload, PageListPayload):
            yield item, payload
        elif depth < MAX_NESTING:
            yield from _flatten(payload.pages, depth + 1)


def combine_summaries(summaries: Sequence[str]) -> str:
    """Pick the overall summary from per-page summaries in page order.

    A first informative summary is used on its own; otherwise the longest
    few are joined, keeping their page order.
    """
    informative = [s for s in summaries if len(s) > MIN_PAGE_SUMMARY_CHARS]
    if informative and len(informative[0]) > STANDALONE_SUMMARY_CHARS:
        return informative[0]

    joinable = [(i, s) for i, s in enumerate(informative) if len(s) > JOINABLE_SUMMARY_CHARS]
    if joinable:
        longest = sorted(joinable, key=lambda pair: len(pair[1]), reverse=True)
        chosen = sorted(longest[:MAX_JOINED_SUMMARIES])
        return "\n\n".join(s for _, s in chosen)

    return "\n\n".join(s for s in summaries if s)


def aggregate_partials(partials: Sequence[tuple[int, PartialResult]]) -> CanonicalResult:
    merged = PartialResult(pages=[])
    summaries: list[str] = []
    for page_number, partial in partials:
        summary = partial.summary.strip()
        summaries.append(summary)
        merged.markers.extend(partial.markers)
        merged.recommendations.extend(partial.recommendations)
        merged.pages.append(
            PageSummary(page_number=page_number, summary=defaults.truncate(summary))
        )

    merged.summary = combine_summaries(summaries)
    return finalize(merged)


def aggregate(page_results: Sequence[Any]) -> CanonicalResult:
    """Aggregate raw per-page outputs, in page order, into one canonical result."""
    partials = [
        (page_number_of(item, position), partial_from(payload))
        for position, (item, payload) in enumerate(_flatten(page_results), start=1)
    ]
    Log.debug(f"Aggregating {len(partials)} page results")
    return aggregate_partials(partials)
