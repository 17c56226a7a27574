"""Tests for the learning store."""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alamat_parser.learning import LearningStore
from alamat_parser.schemas import LearningSnapshot


class TestLearningStore:
    """Test cases for LearningStore updates."""

    @pytest.fixture
    def store(self):
        return LearningStore()

    def test_learn_counts_words_and_patterns(self, store):
        store.learn(["kebon", "melati"], "district->village", {})
        store.learn(["kebon"], "district->village", {})

        assert store.word_frequency["kebon"] == 2
        assert store.word_frequency["melati"] == 1
        assert store.pattern_frequency["district->village"] == 2

    def test_empty_pattern_not_counted(self, store):
        store.learn(["lorem"], "", {})
        assert len(store.pattern_frequency) == 0
        assert store.word_frequency["lorem"] == 1

    def test_corrections_lowercased_and_overwritten(self, store):
        store.learn([], None, {"TanahAbang": "Tanah Abang"})
        store.learn([], None, {"tanahabang": "Tanah Abang Baru"})

        assert store.corrections == {"tanahabang": "Tanah Abang Baru"}
        assert store.correction_for("TANAHABANG") == "Tanah Abang Baru"
        assert store.correction_for("unknown") is None

    def test_stats(self, store):
        store.learn(["kebon", "melati"], "village", {"kebonmelati": "Kebon Melati"})
        assert store.stats() == {"learned_words": 2, "address_patterns": 1, "corrections": 1}

    def test_clear(self, store):
        store.learn(["kebon"], "village", {"a": "b"})
        store.clear()
        assert store.stats() == {"learned_words": 0, "address_patterns": 0, "corrections": 0}


class TestCorrectionApplication:
    """Test cases for apply_corrections."""

    def test_case_insensitive_substitution(self):
        store = LearningStore(corrections={"tanahabang": "Tanah Abang"})
        assert store.apply_corrections("jalan TanahAbang no 5") == "jalan Tanah Abang no 5"

    def test_all_occurrences_replaced(self):
        store = LearningStore(corrections={"jkt": "jakarta"})
        assert store.apply_corrections("jkt pusat jkt") == "jakarta pusat jakarta"

    def test_not_limited_to_token_boundaries(self):
        """Test a short key also rewrites text inside longer words."""
        store = LearningStore(corrections={"ab": "xy"})
        assert store.apply_corrections("tanah abang") == "tanah xyang"

    def test_applied_in_insertion_order(self):
        store = LearningStore(corrections={"abc": "x", "x": "y"})
        assert store.apply_corrections("abc") == "y"

    def test_keys_are_literal(self):
        store = LearningStore(corrections={"a.c": "z", "b\\1": "q"})
        assert store.apply_corrections("abc a.c") == "abc z"

    def test_no_corrections(self):
        assert LearningStore().apply_corrections("kebon melati") == "kebon melati"


class TestSnapshots:
    """Test export/import of learning state."""

    @pytest.fixture
    def store(self):
        store = LearningStore()
        store.learn(["kebon", "melati", "tanahabang"], "district->village", {"tanahabang": "Tanah Abang"})
        store.learn(["kebon"], "village", {})
        return store

    def test_round_trip(self, store):
        """Test import(export(state)) reproduces all three maps."""
        snapshot = store.snapshot()
        restored = LearningStore()
        restored.restore(snapshot)

        assert restored.word_frequency == store.word_frequency
        assert restored.pattern_frequency == store.pattern_frequency
        assert restored.corrections == store.corrections
        assert snapshot.exported_at is not None

    def test_round_trip_through_json(self, store):
        payload = store.snapshot().model_dump(mode="json")
        restored = LearningStore()
        restored.restore(payload)

        assert restored.snapshot().corrections == {"tanahabang": "Tanah Abang"}
        assert restored.word_frequency["kebon"] == 2

    def test_restore_is_idempotent(self, store):
        snapshot = store.snapshot()
        store.restore(snapshot)
        store.restore(snapshot)
        assert store.snapshot().word_frequency == snapshot.word_frequency

    def test_partial_restore_keeps_absent_maps(self, store):
        store.restore(LearningSnapshot(corrections={}))

        assert store.corrections == {}
        assert store.word_frequency["kebon"] == 2

    def test_snapshot_is_a_copy(self, store):
        snapshot = store.snapshot()
        store.learn(["kebon"], None, {})
        assert snapshot.word_frequency["kebon"] == 2


class TestConcurrency:
    """Test concurrent updates through the store lock."""

    def test_parallel_learn(self):
        store = LearningStore()

        def worker():
            for _ in range(200):
                store.learn(["kebon", "melati"], "village", {})

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.word_frequency["kebon"] == 1600
        assert store.pattern_frequency["village"] == 1600
