"""Address normalization utilities."""

import re

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_POSTAL_CODE = re.compile(r"\b\d{5}\b")


def normalize_text(text: str | None) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    if not text:
        return ""
    text = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


class AddressNormalizer:
    """
    Normalizes Indonesian addresses for consistent processing.

    Handles:
    - Case normalization
    - Punctuation removal
    - Whitespace cleanup
    - Common abbreviation expansion (separate step)
    """

    # Common abbreviations in Indonesian addresses, matched as whole tokens
    ABBREVIATIONS = {
        # Street-level
        "jl": "jalan",
        "jln": "jalan",
        "gg": "gang",
        "kp": "kampung",
        "komp": "komplek",
        "perum": "perumahan",
        # Administrative prefixes
        "kel": "kelurahan",
        "ds": "desa",
        "kec": "kecamatan",
        "kab": "kabupaten",
        "prov": "provinsi",
        "prop": "provinsi",
        # Regional shorthand
        "jkt": "jakarta",
        "jakpus": "jakarta pusat",
        "jaksel": "jakarta selatan",
        "jakbar": "jakarta barat",
        "jakut": "jakarta utara",
        "jaktim": "jakarta timur",
        "jabar": "jawa barat",
        "jateng": "jawa tengah",
        "jatim": "jawa timur",
        "diy": "di yogyakarta",
        "sumut": "sumatera utara",
        "sumbar": "sumatera barat",
        "sumsel": "sumatera selatan",
        "kalbar": "kalimantan barat",
        "kalteng": "kalimantan tengah",
        "kalsel": "kalimantan selatan",
        "kaltim": "kalimantan timur",
        "kaltara": "kalimantan utara",
        "sulut": "sulawesi utara",
        "sulteng": "sulawesi tengah",
        "sulsel": "sulawesi selatan",
        "sulbar": "sulawesi barat",
        "sultra": "sulawesi tenggara",
        "ntb": "nusa tenggara barat",
        "ntt": "nusa tenggara timur",
        "babel": "kepulauan bangka belitung",
        "kepri": "kepulauan riau",
    }

    def __init__(self, expand_abbrev: bool = True):
        """
        Initialize normalizer.

        Args:
            expand_abbrev: Expand common abbreviations in expand_abbreviations()
        """
        self.expand_abbrev = expand_abbrev

        # Longest keys first so "jakpus" is never shadowed by a shorter key
        keys = sorted(self.ABBREVIATIONS, key=len, reverse=True)
        self._abbrev_pattern = re.compile(
            r"\b(" + "|".join(re.escape(k) for k in keys) + r")\b"
        )

    def normalize(self, address: str | None) -> str:
        """
        Normalize an address string.

        Args:
            address: Raw address string

        Returns:
            Lowercase text with punctuation replaced by spaces and single spacing
        """
        return normalize_text(address)

    def expand_abbreviations(self, text: str) -> str:
        """Expand abbreviations in already-normalized text."""
        if not self.expand_abbrev or not text:
            return text
        return self._abbrev_pattern.sub(lambda m: self.ABBREVIATIONS[m.group(1)], text)

    def extract_postal_code(self, address: str) -> str | None:
        """Extract the first standalone 5-digit postal code."""
        match = _POSTAL_CODE.search(address or "")
        return match.group(0) if match else None

    def tokenize(self, text: str) -> list[str]:
        """Split normalized text on whitespace."""
        return text.split() if text else []
