"""Gazetteer storage, indexing and fuzzy lookup."""

from alamat_parser.gazetteer.fuzzy import FuzzyMatcher, levenshtein_similarity
from alamat_parser.gazetteer.index import HierarchicalIndex
from alamat_parser.gazetteer.store import (
    SAMPLE_GAZETTEER_PATH,
    GazetteerLoadError,
    GazetteerStore,
)

__all__ = [
    "FuzzyMatcher",
    "GazetteerLoadError",
    "GazetteerStore",
    "HierarchicalIndex",
    "SAMPLE_GAZETTEER_PATH",
    "levenshtein_similarity",
]
