"""Session-scoped adaptive learning state."""

from __future__ import annotations

import logging
import re
import threading
from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from alamat_parser.schemas import LearningSnapshot

logger = logging.getLogger(__name__)


class LearningStore:
    """
    Word frequencies, extraction-pattern frequencies and learned corrections.

    Created empty (or from a snapshot), mutated once per resolve call and
    never expired. Every read and write goes through one re-entrant lock,
    so a single store can back an engine shared between threads.

    Example:
        >>> store = LearningStore()
        >>> store.learn(["kebon", "melati"], "village", {})
        >>> store.word_frequency["kebon"]
        1
    """

    def __init__(
        self,
        word_frequency: Mapping[str, int] | None = None,
        pattern_frequency: Mapping[str, int] | None = None,
        corrections: Mapping[str, str] | None = None,
    ):
        self._lock = threading.RLock()
        self.word_frequency: Counter[str] = Counter(word_frequency or {})
        self.pattern_frequency: Counter[str] = Counter(pattern_frequency or {})
        # Insertion order is the order corrections are applied in
        self.corrections: dict[str, str] = dict(corrections or {})

    def apply_corrections(self, text: str) -> str:
        """
        Substitute every learned wrong -> right pair across the whole text.

        Matching is case-insensitive and not limited to token boundaries.
        """
        with self._lock:
            pairs = list(self.corrections.items())

        for wrong, right in pairs:
            if not wrong:
                continue
            text = re.sub(re.escape(wrong), lambda _m, r=right: r, text, flags=re.IGNORECASE)
        return text

    def correction_for(self, text: str) -> str | None:
        with self._lock:
            return self.corrections.get(text.lower())

    def learn(
        self,
        words: Iterable[str],
        pattern: str | None,
        corrections: Mapping[str, str],
    ) -> None:
        """
        Fold one resolve call into the state as a single critical section.

        Args:
            words: Tokens to count
            pattern: Extracted-level signature; skipped when empty
            corrections: wrong -> right pairs; later entries overwrite earlier ones
        """
        with self._lock:
            self.word_frequency.update(words)
            if pattern:
                self.pattern_frequency[pattern] += 1
            for wrong, right in corrections.items():
                self.corrections[wrong.lower()] = right
                logger.debug(f"Learned correction '{wrong}' -> '{right}'")

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "learned_words": len(self.word_frequency),
                "address_patterns": len(self.pattern_frequency),
                "corrections": len(self.corrections),
            }

    def snapshot(self) -> LearningSnapshot:
        """Copy of the full state, timestamped."""
        with self._lock:
            return LearningSnapshot(
                word_frequency=dict(self.word_frequency),
                pattern_frequency=dict(self.pattern_frequency),
                corrections=dict(self.corrections),
                exported_at=datetime.now(timezone.utc),
            )

    def restore(self, snapshot: LearningSnapshot | Mapping) -> None:
        """
        Replace state from a snapshot.

        Each map present in the snapshot replaces the current one; maps that
        are absent are left as they are.
        """
        if not isinstance(snapshot, LearningSnapshot):
            snapshot = LearningSnapshot.model_validate(snapshot)

        with self._lock:
            if snapshot.word_frequency is not None:
                self.word_frequency = Counter(snapshot.word_frequency)
            if snapshot.pattern_frequency is not None:
                self.pattern_frequency = Counter(snapshot.pattern_frequency)
            if snapshot.corrections is not None:
                self.corrections = dict(snapshot.corrections)

    def clear(self) -> None:
        with self._lock:
            self.word_frequency.clear()
            self.pattern_frequency.clear()
            self.corrections.clear()
