"""
Main address resolution pipeline.

Orchestrates normalization, learned corrections, component extraction,
hierarchical gazetteer lookup, fuzzy fallback, confidence scoring and the
learning update.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from alamat_parser.config import ResolverConfig, clamp_unit
from alamat_parser.extraction import ComponentExtractor
from alamat_parser.gazetteer import (
    FuzzyMatcher,
    GazetteerLoadError,
    GazetteerStore,
    HierarchicalIndex,
)
from alamat_parser.learning import LearningStore
from alamat_parser.preprocessing import AddressNormalizer
from alamat_parser.schemas import (
    ADMIN_LEVELS,
    BatchResolveResponse,
    CorrectionHint,
    ExtractedComponents,
    LearningSnapshot,
    LearningStats,
    MatchResult,
    ParsedAddress,
    ResolveResponse,
    ResolveResult,
    Suggestion,
)

logger = logging.getLogger(__name__)

INVALID_INPUT_ERROR = "Invalid address input"


@dataclass(frozen=True)
class _Gazetteer:
    """Store, index and extractor built together and swapped as one."""

    store: GazetteerStore
    index: HierarchicalIndex
    extractor: ComponentExtractor

    @classmethod
    def build(cls, store: GazetteerStore) -> _Gazetteer:
        index = HierarchicalIndex(store)
        extractor = ComponentExtractor.with_names(
            {level: index.keys(level) for level in ADMIN_LEVELS}
        )
        return cls(store=store, index=index, extractor=extractor)


class AddressResolver:
    """
    Resolves free-text Indonesian addresses against a gazetteer.

    Combines:
    - Normalization and abbreviation expansion
    - Learned wrong -> right corrections
    - Closed-vocabulary component extraction
    - Hierarchical index lookup (narrowest match wins)
    - Fuzzy province fallback and suggestions
    - Session-local learning

    Example:
        >>> resolver = AddressResolver.with_sample_gazetteer()
        >>> result = resolver.resolve("Kebon Melati Tanah Abang Jakarta Pusat")
        >>> result.parsed.postal_code
        '10120'
    """

    def __init__(
        self,
        gazetteer: GazetteerStore | None = None,
        learning: LearningStore | None = None,
        config: ResolverConfig | None = None,
    ):
        """
        Initialize resolver.

        Args:
            gazetteer: Reference records; an empty store when omitted
            learning: Learning state to read and update; a fresh one when omitted
            config: Resolver configuration
        """
        # Own copy, so settings changes stay local to this resolver
        self.config = replace(config) if config is not None else ResolverConfig()
        self.learning = learning if learning is not None else LearningStore()

        self.normalizer = AddressNormalizer(expand_abbrev=self.config.expand_abbreviations)
        self.matcher = FuzzyMatcher(threshold=self.config.fuzzy_match_threshold)

        self._load_lock = threading.Lock()
        self._gazetteer = _Gazetteer.build(gazetteer or GazetteerStore())

    @classmethod
    def from_csv(
        cls,
        path: str | Path,
        learning: LearningStore | None = None,
        config: ResolverConfig | None = None,
    ) -> AddressResolver:
        """Create a resolver over a CSV reference table."""
        return cls(GazetteerStore.from_csv(path), learning=learning, config=config)

    @classmethod
    def with_sample_gazetteer(
        cls,
        learning: LearningStore | None = None,
        config: ResolverConfig | None = None,
    ) -> AddressResolver:
        """
        Create a resolver over the bundled sample table.

        Useful for testing or demos when no reference table is at hand.
        """
        return cls(GazetteerStore.sample(), learning=learning, config=config)

    # Gazetteer

    @property
    def gazetteer(self) -> GazetteerStore:
        return self._gazetteer.store

    @property
    def index(self) -> HierarchicalIndex:
        return self._gazetteer.index

    @property
    def extractor(self) -> ComponentExtractor:
        return self._gazetteer.extractor

    def load(self, table: GazetteerStore | str | Path | Iterable[Mapping[str, str]]) -> bool:
        """
        (Re)build the gazetteer and index.

        Args:
            table: A GazetteerStore, a CSV path, or row mappings keyed by header

        Returns:
            True on success

        Raises:
            GazetteerLoadError: The table is unreadable or malformed. The
                previously loaded gazetteer stays in place.
        """
        with self._load_lock:
            try:
                if isinstance(table, GazetteerStore):
                    store = table
                elif isinstance(table, (str, Path)):
                    store = GazetteerStore.from_csv(table)
                else:
                    store = GazetteerStore.from_rows(table)
            except GazetteerLoadError as e:
                logger.warning(f"Gazetteer load failed: {e}")
                raise
            except TypeError as e:
                logger.warning(f"Gazetteer load failed: {e}")
                raise GazetteerLoadError(f"Unsupported reference table: {e}") from e

            # Readers pick up the new store, index and extractor together
            self._gazetteer = _Gazetteer.build(store)

        logger.info(f"Loaded gazetteer with {len(store)} records")
        return True

    def load_csv(self, path: str | Path) -> bool:
        return self.load(Path(path))

    def load_csv_text(self, text: str) -> bool:
        try:
            store = GazetteerStore.from_csv_text(text)
        except GazetteerLoadError as e:
            logger.warning(f"Gazetteer load failed: {e}")
            raise
        return self.load(store)

    # Resolution

    def resolve(self, address: str) -> ResolveResult:
        """
        Resolve a single address.

        Args:
            address: Raw address string

        Returns:
            ResolveResult; non-text or blank input gives a failed result
            with confidence 0.0
        """
        if not isinstance(address, str) or not address.strip():
            return ResolveResult(
                success=False,
                parsed=ParsedAddress(),
                confidence=0.0,
                error=INVALID_INPUT_ERROR,
            )

        # Snapshot so a concurrent reload cannot mix two gazetteers in one call
        gazetteer = self._gazetteer

        original = address.strip()
        normalized = self.normalizer.normalize(original)
        expanded = self.normalizer.expand_abbreviations(normalized)
        corrected = self.learning.apply_corrections(expanded)

        components = gazetteer.extractor.extract(corrected)
        matches = self._find_matches(gazetteer.index, components)
        confidence = self._calculate_confidence(components, matches)

        candidates = self._suggestions_by_level(gazetteer.index, components, matches)
        suggestions = [s for level in ADMIN_LEVELS for s in candidates.get(level, [])]
        suggestions = suggestions[:self.config.max_suggestions]

        if self.config.learning_enabled:
            self._learn(normalized, components, candidates, confidence)

        logger.debug(f"Resolved '{original}' with confidence {confidence:.2f}")

        return ResolveResult(
            success=confidence > self.config.success_threshold,
            parsed=self._merge(original, corrected, components, matches),
            confidence=confidence,
            suggestions=suggestions,
            corrections=self._corrections_for(components),
            extracted=components,
            matched=matches,
        )

    def resolve_with_timing(self, address: str) -> ResolveResponse:
        """
        Resolve address and return response with timing info.

        Args:
            address: Raw address string

        Returns:
            ResolveResponse with result and timing
        """
        start = time.perf_counter()

        result = self.resolve(address)
        elapsed = (time.perf_counter() - start) * 1000

        return ResolveResponse(
            success=result.error is None,
            result=result,
            error=result.error,
            inference_time_ms=elapsed,
        )

    def resolve_batch(self, addresses: list[str]) -> BatchResolveResponse:
        """
        Resolve multiple addresses in order.

        Args:
            addresses: List of raw address strings

        Returns:
            BatchResolveResponse with all results
        """
        start = time.perf_counter()

        results = [self.resolve(address) for address in addresses]

        total_time = (time.perf_counter() - start) * 1000
        avg_time = total_time / len(addresses) if addresses else 0

        return BatchResolveResponse(
            success=True,
            results=results,
            total_inference_time_ms=total_time,
            avg_inference_time_ms=avg_time,
        )

    def _find_matches(
        self,
        index: HierarchicalIndex,
        components: ExtractedComponents,
    ) -> MatchResult:
        """Exact lookup broadest to narrowest, then fuzzy province fallback."""
        matched: dict[str, str | None] = {}

        for depth, level in enumerate(ADMIN_LEVELS):
            value = getattr(components, level)
            if not value:
                continue
            record = index.first(level, value)
            if record is None:
                continue
            # Narrower matches overwrite what broader levels set
            for field in ADMIN_LEVELS[:depth + 1]:
                matched[field] = record.get(field) or None
            matched["postal_code"] = record.postal_code or None

        if not matched.get("province") and components.province:
            best = self.matcher.best_match(
                components.province,
                index.keys("province"),
                threshold=self.config.fuzzy_match_threshold,
            )
            if best is not None:
                record = index.first("province", best[0])
                matched["province"] = record.province or None
                matched["postal_code"] = record.postal_code or None

        return MatchResult(**matched)

    def _calculate_confidence(
        self,
        components: ExtractedComponents,
        matches: MatchResult,
    ) -> float:
        """Share of extracted levels that resolved, plus a postal code bonus."""
        score = 0.0
        total = 0

        for level in ADMIN_LEVELS:
            if not getattr(components, level):
                continue
            total += 1
            if getattr(matches, level):
                score += self.config.matched_credit
            else:
                score += self.config.partial_credit

        if components.postal_code and components.postal_code == matches.postal_code:
            score += self.config.postal_code_bonus

        if total == 0:
            return 0.0
        return clamp_unit(score / total)

    def _suggestions_by_level(
        self,
        index: HierarchicalIndex,
        components: ExtractedComponents,
        matches: MatchResult,
    ) -> dict[str, list[Suggestion]]:
        """Gazetteer names resembling each extracted-but-unmatched level."""
        suggestions = {}
        for level in ADMIN_LEVELS:
            value = getattr(components, level)
            if value and not getattr(matches, level):
                suggestions[level] = self.suggest(level, value, index=index)
        return suggestions

    def suggest(
        self,
        level: str,
        value: str,
        index: HierarchicalIndex | None = None,
    ) -> list[Suggestion]:
        """
        Rank a level's gazetteer names against a token.

        Args:
            level: Administrative level to search
            value: Token to compare
            index: Index to search; the current one when omitted

        Returns:
            Up to max_suggestions_per_field suggestions, in index order
        """
        index = index or self.index
        ranked = self.matcher.rank(
            self.normalizer.normalize(value),
            index.keys(level),
            min_similarity=self.config.suggestion_threshold,
            limit=self.config.max_suggestions_per_field,
        )
        return [
            Suggestion(field=level, value=index.canonical_name(level, key), similarity=score)
            for key, score in ranked
        ]

    def _corrections_for(self, components: ExtractedComponents) -> list[CorrectionHint]:
        hints = []
        for field in ADMIN_LEVELS + ("postal_code",):
            value = getattr(components, field)
            if not value:
                continue
            correction = self.learning.correction_for(value)
            if correction:
                hints.append(CorrectionHint(original=value, suggested=correction))
        return hints

    def _learn(
        self,
        normalized: str,
        components: ExtractedComponents,
        suggestions: dict[str, list[Suggestion]],
        confidence: float,
    ) -> None:
        words = [
            word for word in self.normalizer.tokenize(normalized)
            if len(word) >= self.config.min_word_length
        ]
        pattern = self.config.pattern_separator.join(components.levels())

        corrections = {}
        if confidence < self.config.correction_confidence_threshold:
            for level, ranked in suggestions.items():
                if ranked:
                    corrections[getattr(components, level).lower()] = ranked[0].value

        self.learning.learn(words, pattern, corrections)

    @staticmethod
    def _merge(
        original: str,
        normalized: str,
        components: ExtractedComponents,
        matches: MatchResult,
    ) -> ParsedAddress:
        fields = {
            field: getattr(matches, field) or getattr(components, field)
            for field in ADMIN_LEVELS + ("postal_code",)
        }
        return ParsedAddress(
            original=original,
            normalized=normalized,
            detail=components.detail,
            **fields,
        )

    # Learning state and settings

    def get_learning_stats(self) -> LearningStats:
        """Counts of learned words, patterns, corrections and gazetteer size."""
        return LearningStats(**self.learning.stats(), gazetteer_size=len(self.gazetteer))

    def export_learning_state(self) -> LearningSnapshot:
        return self.learning.snapshot()

    def import_learning_state(self, snapshot: LearningSnapshot | Mapping) -> None:
        self.learning.restore(snapshot)

    def set_learning_enabled(self, enabled: bool) -> None:
        self.config.learning_enabled = bool(enabled)

    def set_fuzzy_threshold(self, threshold: float) -> float:
        """Set the province fallback threshold, clamped to [0, 1]."""
        self.config.fuzzy_match_threshold = clamp_unit(threshold)
        self.matcher.threshold = self.config.fuzzy_match_threshold
        return self.config.fuzzy_match_threshold


# Convenience function for quick resolution
def resolve_address(address: str, gazetteer_path: str | Path | None = None) -> ResolveResult:
    """
    Quick address resolution function.

    Args:
        address: Address to resolve
        gazetteer_path: Optional CSV reference table (bundled sample if None)

    Returns:
        ResolveResult
    """
    if gazetteer_path:
        resolver = AddressResolver.from_csv(gazetteer_path)
    else:
        resolver = AddressResolver.with_sample_gazetteer()

    return resolver.resolve(address)
