from dataclasses import dataclass, field


@dataclass(frozen=True)
class Marker:
    """One out-of-reference-range lab value. Every field is always a string."""

    name: str
    value: str
    unit: str
    reference_range: str
    interpretation: str

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "value": self.value,
            "unit": self.unit,
            "referenceRange": self.reference_range,
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True)
class PageSummary:
    """Traceability link from a canonical result back to a source page."""

    page_number: int
    summary: str

    def to_dict(self) -> dict[str, object]:
        return {"pageNumber": self.page_number, "summary": self.summary}


@dataclass(frozen=True)
class CanonicalResult:
    """The single normalized shape every analysis output is converted into.

    ``summary`` and ``recommendations`` are never empty, marker names are
    unique and recommendations are unique and longer than five characters.
    """

    summary: str
    markers: list[Marker] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    pages: list[PageSummary] | None = None
    is_demo: bool = False

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "summary": self.summary,
            "markers": [marker.to_dict() for marker in self.markers],
            "recommendations": list(self.recommendations),
        }
        if self.pages is not None:
            payload["pages"] = [page.to_dict() for page in self.pages]
        if self.is_demo:
            payload["isDemo"] = True
        return payload


@dataclass
class PartialResult:
    """Fields recovered from one payload before defaults and dedup are applied."""

    summary: str = ""
    markers: list[Marker] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    pages: list[PageSummary] | None = None
