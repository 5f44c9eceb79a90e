from labinsight.normalization.aggregator import aggregate
from labinsight.normalization.models import CanonicalResult, Marker, PageSummary
from labinsight.normalization.normalizer import normalize

__all__ = ["CanonicalResult", "Marker", "PageSummary", "aggregate", "normalize"]
