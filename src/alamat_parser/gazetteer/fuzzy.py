"""Levenshtein-based fuzzy matching against gazetteer keys."""

from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

from alamat_parser.config import clamp_unit


def levenshtein_similarity(a: str, b: str) -> float:
    """
    Normalized edit similarity in [0, 1].

    (max_len - distance) / max_len with unit insertion, deletion and
    substitution costs; two empty strings are identical.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - Levenshtein.distance(a, b)) / longest


class FuzzyMatcher:
    """
    Scores a token against candidate keys.

    Used for the province fallback (best single match at or above
    `threshold`) and for suggestion ranking (every key above a cutoff).
    """

    def __init__(self, threshold: float = 0.8):
        self.threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    @threshold.setter
    def threshold(self, value: float):
        self._threshold = clamp_unit(value)

    def best_match(
        self,
        text: str,
        candidates: Iterable[str],
        threshold: float | None = None,
    ) -> tuple[str, float] | None:
        """
        Best-scoring candidate that meets the threshold.

        Ties keep the earliest candidate.
        """
        threshold = self.threshold if threshold is None else clamp_unit(threshold)
        text = text.lower()

        best: tuple[str, float] | None = None
        best_score = 0.0
        for candidate in candidates:
            score = levenshtein_similarity(text, candidate.lower())
            if score > best_score and score >= threshold:
                best = (candidate, score)
                best_score = score
        return best

    def rank(
        self,
        text: str,
        candidates: Iterable[str],
        min_similarity: float,
        limit: int | None = None,
    ) -> list[tuple[str, float]]:
        """
        Candidates scoring strictly above `min_similarity`, in candidate order.

        Args:
            text: Token to compare
            candidates: Keys to score
            min_similarity: Exclusive lower bound
            limit: Maximum number of results

        Returns:
            List of (candidate, score) tuples
        """
        text = text.lower()
        matches = []
        for candidate in candidates:
            if limit is not None and len(matches) >= limit:
                break
            score = levenshtein_similarity(text, candidate.lower())
            if score > min_similarity:
                matches.append((candidate, score))
        return matches
