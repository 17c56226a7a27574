"""Resolver configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def clamp_unit(value: float) -> float:
    """Clamp a threshold into [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ResolverConfig:
    """Tunables for the address resolver."""

    # Fuzzy matching
    fuzzy_match_threshold: float = 0.8  # province fallback, inclusive
    suggestion_threshold: float = 0.6  # suggestions, exclusive
    max_suggestions_per_field: int = 3
    max_suggestions: int = 5

    # Confidence scoring
    matched_credit: float = 1.0
    partial_credit: float = 0.3
    postal_code_bonus: float = 0.5
    success_threshold: float = 0.3

    # Learning
    learning_enabled: bool = True
    correction_confidence_threshold: float = 0.7
    min_word_length: int = 3
    pattern_separator: str = "->"

    # Preprocessing
    expand_abbreviations: bool = True

    def __post_init__(self):
        self.fuzzy_match_threshold = clamp_unit(self.fuzzy_match_threshold)
        self.suggestion_threshold = clamp_unit(self.suggestion_threshold)

    @classmethod
    def from_env(cls) -> ResolverConfig:
        """Build a config from ALAMAT_* environment variables."""
        config = cls(
            learning_enabled=_env_flag("ALAMAT_LEARNING_ENABLED", True),
            expand_abbreviations=_env_flag("ALAMAT_EXPAND_ABBREVIATIONS", True),
        )
        threshold = os.getenv("ALAMAT_FUZZY_THRESHOLD")
        if threshold:
            try:
                config.fuzzy_match_threshold = clamp_unit(float(threshold))
            except ValueError:
                logger.warning(
                    f"Ignoring invalid ALAMAT_FUZZY_THRESHOLD={threshold!r}, "
                    f"using {config.fuzzy_match_threshold}"
                )
        return config
