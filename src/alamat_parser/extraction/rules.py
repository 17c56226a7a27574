"""Closed-vocabulary component extraction."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from alamat_parser.preprocessing.normalizer import normalize_text
from alamat_parser.schemas import ADMIN_LEVELS, ExtractedComponents

# Built-in lexicon. Gazetteer names are merged in at load time.
PROVINCES = (
    "aceh", "sumatera utara", "sumatera barat", "sumatera selatan",
    "sumatera tengah", "sumatera timur", "riau", "kepulauan riau", "jambi",
    "bengkulu", "lampung", "kepulauan bangka belitung", "dki jakarta",
    "jawa barat", "jawa tengah", "jawa timur", "banten", "di yogyakarta",
    "bali", "nusa tenggara barat", "nusa tenggara timur",
    "kalimantan barat", "kalimantan tengah", "kalimantan selatan",
    "kalimantan timur", "kalimantan utara", "sulawesi utara",
    "sulawesi tengah", "sulawesi selatan", "sulawesi barat",
    "sulawesi tenggara", "gorontalo", "maluku", "maluku utara", "papua",
    "papua barat",
)

REGENCIES = (
    "jakarta pusat", "jakarta selatan", "jakarta barat", "jakarta utara",
    "jakarta timur", "bogor", "bekasi", "bandung", "semarang", "solo",
    "surabaya", "malang", "medan", "padang", "denpasar", "buleleng",
)

DISTRICTS = (
    "tanah abang", "kebayoran baru", "grogol petamburan", "penjaringan",
    "cileungsi", "bekasi utara", "bandung wetan", "semarang tengah",
    "surabaya pusat", "medan petisah", "medan tuntungan", "padang utara",
    "padang selatan", "denpasar barat",
)

VILLAGES = (
    "sukamaju", "kebon melati", "kebon kacang", "selong", "gunung", "grogol",
    "pluit", "mampir", "cileungsi", "kranji", "kayu tinggi", "citarum",
    "pindrikan kidul", "pindrikan lor", "kemlayan", "serengan", "ketabang",
    "genteng", "klojen", "sukun", "kampung kajanan", "kampung baru",
    "pemecutan", "dauh puri", "petisah tengah", "petisah hulu",
    "tuntungan i", "tuntungan ii", "air tawar barat", "air tawar timur",
    "ranah", "seberang padang",
)

DEFAULT_LEXICON: dict[str, tuple[str, ...]] = {
    "province": PROVINCES,
    "regency_city": REGENCIES,
    "district": DISTRICTS,
    "village": VILLAGES,
}

POSTAL_CODE_PATTERN = re.compile(r"\b\d{5}\b")


def variant_pattern(name: str) -> str:
    """
    Regex for a lexicon name and its common misspellings.

    Every letter may repeat ("barrat") and words may run together
    ("tanahabang").
    """
    words = normalize_text(name).split()
    return r"\s?".join("".join(re.escape(ch) + "+" for ch in word) for word in words)


@dataclass(frozen=True)
class ExtractionRule:
    """One (field, matcher) pair."""

    field: str
    pattern: re.Pattern

    def search(self, text: str) -> str | None:
        """First occurrence in text, lowercased."""
        match = self.pattern.search(text)
        return match.group(0).lower() if match else None

    @classmethod
    def for_names(cls, field: str, names: Iterable[str]) -> ExtractionRule | None:
        unique = {normalize_text(n) for n in names} - {""}
        if not unique:
            return None
        # Longest first so "maluku utara" wins over "maluku" at the same position
        ordered = sorted(unique, key=lambda n: (-len(n), n))
        alternation = "|".join(variant_pattern(n) for n in ordered)
        return cls(field, re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE))


class ComponentExtractor:
    """
    Pulls administrative candidates and a postal code out of normalized text.

    Rules run in a fixed order (postal code, province, regency/city,
    district, village). Each rule scans the whole string independently and
    keeps its first match; nothing is consumed. Tokens not contained in any
    extracted value become the free-text detail.
    """

    def __init__(self, lexicon: Mapping[str, Iterable[str]] | None = None):
        """
        Initialize extractor.

        Args:
            lexicon: level -> known names; defaults to DEFAULT_LEXICON
        """
        lexicon = DEFAULT_LEXICON if lexicon is None else lexicon

        self.vocabulary: dict[str, frozenset[str]] = {
            level: frozenset(normalize_text(n) for n in lexicon.get(level, ())) - {""}
            for level in ADMIN_LEVELS
        }
        self.rules: list[ExtractionRule] = []
        for level in ADMIN_LEVELS:
            rule = ExtractionRule.for_names(level, self.vocabulary[level])
            if rule is not None:
                self.rules.append(rule)

    @classmethod
    def with_names(
        cls,
        extra: Mapping[str, Iterable[str]],
        base: Mapping[str, Iterable[str]] | None = None,
    ) -> ComponentExtractor:
        """Extractor over the base lexicon plus extra names per level."""
        base = DEFAULT_LEXICON if base is None else base
        merged = {
            level: list(base.get(level, ())) + list(extra.get(level, ()))
            for level in ADMIN_LEVELS
        }
        return cls(merged)

    def extract(self, text: str) -> ExtractedComponents:
        """
        Extract components from normalized (and corrected) text.

        Args:
            text: Normalized address text

        Returns:
            ExtractedComponents; unmatched fields are None
        """
        if not text:
            return ExtractedComponents()

        values: dict[str, str | None] = {}

        postal_match = POSTAL_CODE_PATTERN.search(text)
        values["postal_code"] = postal_match.group(0) if postal_match else None

        for rule in self.rules:
            values[rule.field] = rule.search(text)

        found = [v.lower() for v in values.values() if v]
        detail = [
            token for token in text.split()
            if not any(token.lower() in value for value in found)
        ]

        return ExtractedComponents(**values, detail=" ".join(detail))

    def knows(self, level: str, name: str) -> bool:
        """Whether a name is in this extractor's vocabulary."""
        return normalize_text(name) in self.vocabulary[level]
