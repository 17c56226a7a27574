"""Tests for the gazetteer store, hierarchical index and fuzzy matcher."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alamat_parser.gazetteer import (
    SAMPLE_GAZETTEER_PATH,
    FuzzyMatcher,
    GazetteerLoadError,
    GazetteerStore,
    HierarchicalIndex,
    levenshtein_similarity,
)
from alamat_parser.schemas import ADMIN_LEVELS, AddressRecord

CANONICAL_HEADER = "province,regency_city,district,village,postal_code"


class TestGazetteerStore:
    """Test cases for GazetteerStore loading."""

    def test_sample_table(self):
        """Test the bundled table loads with its Indonesian headers."""
        store = GazetteerStore.sample()

        assert len(store) == 33
        assert store[0] == AddressRecord(
            province="DKI Jakarta",
            regency_city="Jakarta Pusat",
            district="Tanah Abang",
            village="Sukamaju",
            postal_code="10120",
        )

    def test_canonical_headers(self):
        store = GazetteerStore.from_csv_text(
            f"{CANONICAL_HEADER}\nBali,Buleleng,Buleleng,Kampung Baru,81113\n"
        )
        assert store[0].village == "Kampung Baru"
        assert store[0].postal_code == "81113"

    def test_short_row_fills_empty(self):
        """Test a missing field is an empty string, not an error."""
        store = GazetteerStore.from_csv_text(f"{CANONICAL_HEADER}\nBali,Denpasar")

        assert store[0].regency_city == "Denpasar"
        assert store[0].district == ""
        assert store[0].postal_code == ""

    def test_quoted_fields_and_whitespace(self):
        store = GazetteerStore.from_csv_text(
            f'{CANONICAL_HEADER}\n" Kepulauan Riau ",Batam,"Batam Kota",Belian,29464'
        )
        assert store[0].province == "Kepulauan Riau"
        assert store[0].district == "Batam Kota"

    def test_blank_lines_skipped(self):
        store = GazetteerStore.from_csv_text(f"{CANONICAL_HEADER}\n\nBali,Denpasar,,,\n\n")
        assert len(store) == 1

    def test_header_only_is_empty_store(self):
        assert len(GazetteerStore.from_csv_text(CANONICAL_HEADER)) == 0

    def test_empty_text_is_load_error(self):
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_csv_text("   ")

    def test_unrecognized_header_is_load_error(self):
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_csv_text("foo,bar\n1,2")

    def test_malformed_csv_is_load_error(self):
        """Test an unterminated quoted field is rejected."""
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_csv_text('province,district\n"Bali,Buleleng')

    def test_missing_file_is_load_error(self, tmp_path):
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_csv(tmp_path / "missing.csv")

    def test_from_csv_path(self, tmp_path):
        path = tmp_path / "wilayah.csv"
        path.write_text("provinsi,kode_pos\nBali,81113\n", encoding="utf-8")

        store = GazetteerStore.from_csv(path)
        assert store[0].province == "Bali"
        assert store[0].postal_code == "81113"

    def test_from_rows(self):
        store = GazetteerStore.from_rows([
            {"provinsi": "Bali", "kelurahan_desa": "Pemecutan", "kode_pos": 80118},
            {"province": "Bali", "village": None, "unused": "x"},
        ])

        assert store[0].village == "Pemecutan"
        assert store[0].postal_code == "80118"
        assert store[1].village == ""

    def test_from_rows_rejects_non_mapping(self):
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_rows([["Bali", "Buleleng"]])

    def test_from_rows_rejects_unrecognized_columns(self):
        with pytest.raises(GazetteerLoadError):
            GazetteerStore.from_rows([{"foo": "x"}])

    def test_records_are_frozen(self):
        record = GazetteerStore.sample()[0]
        with pytest.raises(Exception):  # Pydantic ValidationError
            record.province = "Bali"


class TestHierarchicalIndex:
    """Test cases for HierarchicalIndex."""

    @pytest.fixture
    def index(self):
        return HierarchicalIndex(GazetteerStore.from_csv(SAMPLE_GAZETTEER_PATH))

    def test_every_record_reachable(self, index):
        """Test each record is reachable from every level it has a name for."""
        for record in index.store:
            for level in ADMIN_LEVELS:
                if record.get(level):
                    assert any(r is record for r in index.lookup(level, record.get(level)))

    def test_records_shared_not_copied(self, index):
        record = index.first("village", "Kebon Melati")
        assert index.lookup("district", "Tanah Abang")[1] is record

    def test_lookup_preserves_insertion_order(self, index):
        villages = [r.village for r in index.lookup("district", "tanah abang")]
        assert villages == ["Sukamaju", "Kebon Melati", "Kebon Kacang"]

    def test_keys_are_normalized(self, index):
        assert index.keys("province") == [
            "dki jakarta", "jawa barat", "jawa tengah", "jawa timur",
            "bali", "sumatera utara", "sumatera barat",
        ]
        assert index.contains("province", "DKI  Jakarta")

    def test_unknown_name(self, index):
        assert index.lookup("village", "atlantis") == []
        assert index.first("village", "atlantis") is None
        assert index.first("village", None) is None

    def test_canonical_name(self, index):
        assert index.canonical_name("village", "tuntungan ii") == "Tuntungan II"

    def test_empty_fields_not_indexed(self):
        index = HierarchicalIndex(GazetteerStore([AddressRecord(province="Bali")]))

        assert index.keys("province") == ["bali"]
        assert index.keys("village") == []
        assert index.level_size("district") == 0
        assert len(index) == 1


class TestLevenshteinSimilarity:
    """Test cases for the similarity function."""

    def test_identity(self):
        for text in ["", "a", "jawa barat", "tuntungan ii"]:
            assert levenshtein_similarity(text, text) == 1.0

    def test_both_empty(self):
        assert levenshtein_similarity("", "") == 1.0

    def test_one_empty(self):
        assert levenshtein_similarity("abc", "") == 0.0

    def test_symmetric(self):
        pairs = [
            ("jawa barrat", "jawa barat"),
            ("kitten", "sitting"),
            ("tanahabang", "tanah abang"),
            ("bali", "maluku"),
            ("", "papua"),
        ]
        for a, b in pairs:
            assert levenshtein_similarity(a, b) == levenshtein_similarity(b, a)

    def test_known_values(self):
        assert levenshtein_similarity("jawa barrat", "jawa barat") == pytest.approx(10 / 11)
        assert levenshtein_similarity("kitten", "sitting") == pytest.approx(4 / 7)

    def test_no_transposition_discount(self):
        """Test a swap costs two edits."""
        assert levenshtein_similarity("ab", "ba") == 0.0


class TestFuzzyMatcher:
    """Test cases for FuzzyMatcher."""

    @pytest.fixture
    def matcher(self):
        return FuzzyMatcher(threshold=0.8)

    def test_best_match(self, matcher):
        best = matcher.best_match("jawa barrat", ["jawa tengah", "jawa barat", "bali"])
        assert best == ("jawa barat", pytest.approx(10 / 11))

    def test_best_match_below_threshold(self, matcher):
        assert matcher.best_match("jawa barrat", ["bali", "papua"]) is None

    def test_best_match_keeps_first_of_ties(self, matcher):
        assert matcher.best_match("ab", ["ac", "ad"], threshold=0.5) == ("ac", 0.5)

    def test_threshold_is_monotonic_filter(self, matcher):
        """Test raising the threshold never adds matches."""
        keys = ["dki jakarta", "jawa barat", "jawa tengah", "bali", "sumatera utara"]
        tokens = ["jawa barrat", "jawa tenggah", "ballii", "dki jakartaa", "sumatra utara", "xyz"]

        counts = []
        for threshold in [0.0, 0.5, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0]:
            counts.append(sum(
                matcher.best_match(token, keys, threshold=threshold) is not None
                for token in tokens
            ))

        assert counts == sorted(counts, reverse=True)

    def test_threshold_clamped(self):
        assert FuzzyMatcher(threshold=1.5).threshold == 1.0
        assert FuzzyMatcher(threshold=-0.5).threshold == 0.0

    def test_rank_is_exclusive_and_ordered(self, matcher):
        ranked = matcher.rank("abcd", ["abce", "abcd", "zzzz", "abcf"], min_similarity=0.7)
        assert [key for key, _ in ranked] == ["abce", "abcd", "abcf"]

        assert matcher.rank("abcd", ["abce"], min_similarity=0.75) == []

    def test_rank_limit(self, matcher):
        ranked = matcher.rank("sukamaju", ["sukamaja", "sukamaje", "sukamaji", "sukamajo"], 0.6, limit=3)
        assert len(ranked) == 3
