"""
Indonesian Address Parser - gazetteer-backed address resolution.

Resolves free-text Indonesian postal addresses into province,
regency/city, district, village and postal code, tolerating misspellings
and abbreviations and learning corrections as it is used.
"""

__version__ = "1.0.0"

from alamat_parser.config import ResolverConfig
from alamat_parser.gazetteer import GazetteerLoadError, GazetteerStore
from alamat_parser.learning import LearningStore
from alamat_parser.pipeline import AddressResolver, resolve_address
from alamat_parser.schemas import (
    AddressRecord,
    LearningSnapshot,
    LearningStats,
    ParsedAddress,
    ResolveResult,
)

__all__ = [
    "AddressResolver",
    "AddressRecord",
    "GazetteerLoadError",
    "GazetteerStore",
    "LearningSnapshot",
    "LearningStats",
    "LearningStore",
    "ParsedAddress",
    "ResolveResult",
    "ResolverConfig",
    "resolve_address",
    "__version__",
]
