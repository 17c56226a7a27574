"""Gazetteer store: the canonical address records loaded from a reference table."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from alamat_parser.schemas import RECORD_FIELDS, AddressRecord

logger = logging.getLogger(__name__)

SAMPLE_GAZETTEER_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_gazetteer.csv"

# Accepted header names -> record field
HEADER_ALIASES = {
    "province": "province",
    "provinsi": "province",
    "regency_city": "regency_city",
    "kabupaten_kota": "regency_city",
    "kabupaten": "regency_city",
    "kota": "regency_city",
    "district": "district",
    "kecamatan": "district",
    "village": "village",
    "kelurahan_desa": "village",
    "kelurahan": "village",
    "desa": "village",
    "postal_code": "postal_code",
    "kode_pos": "postal_code",
    "kodepos": "postal_code",
}


class GazetteerLoadError(ValueError):
    """The reference table could not be read or has no usable structure."""


class GazetteerStore:
    """
    Immutable, insertion-ordered sequence of AddressRecord.

    Index structures refer to records by position, so each record is held
    exactly once regardless of how many index levels point at it.
    """

    def __init__(self, records: Iterable[AddressRecord] = ()):
        self._records: tuple[AddressRecord, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __getitem__(self, position: int) -> AddressRecord:
        return self._records[position]

    @property
    def records(self) -> tuple[AddressRecord, ...]:
        return self._records

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, str | None]]) -> GazetteerStore:
        """
        Build a store from row mappings keyed by header name.

        Header names may be canonical or one of HEADER_ALIASES. Missing or
        None cells become empty strings.
        """
        records = []
        for line_no, row in enumerate(rows, start=1):
            if not isinstance(row, Mapping):
                raise GazetteerLoadError(f"Row {line_no} is not a mapping: {row!r}")
            values = {}
            for header, value in row.items():
                field = HEADER_ALIASES.get(str(header).strip().lower()) if header is not None else None
                if field is None or field in values:
                    continue
                values[field] = value if isinstance(value, str) else ("" if value is None else str(value))
            if not values:
                raise GazetteerLoadError(
                    f"Row {line_no} has no recognized columns {list(row)!r}; "
                    f"expected {', '.join(RECORD_FIELDS)}"
                )
            records.append(AddressRecord(**values))
        return cls(records)

    @classmethod
    def from_csv_text(cls, text: str) -> GazetteerStore:
        """Parse CSV text with a header row."""
        if not isinstance(text, str) or not text.strip():
            raise GazetteerLoadError("Reference table is empty")

        reader = csv.reader(io.StringIO(text.strip()), strict=True)
        try:
            header = next(reader)
            fields = [HEADER_ALIASES.get(h.strip().lower()) for h in header]
            if not any(fields):
                raise GazetteerLoadError(
                    f"No recognized columns in header {header!r}; expected {', '.join(RECORD_FIELDS)}"
                )

            records = []
            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue
                values = {}
                for position, field in enumerate(fields):
                    if field is None or field in values:
                        continue
                    # Short rows: missing cells are empty
                    values[field] = row[position] if position < len(row) else ""
                records.append(AddressRecord(**values))
        except csv.Error as e:
            raise GazetteerLoadError(f"Malformed CSV at line {reader.line_num}: {e}") from e

        return cls(records)

    @classmethod
    def from_csv(cls, path: str | Path) -> GazetteerStore:
        """Read a CSV reference table from disk."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise GazetteerLoadError(f"Cannot read reference table {path}: {e}") from e

        store = cls.from_csv_text(text)
        logger.info(f"Read {len(store)} gazetteer records from {path}")
        return store

    @classmethod
    def sample(cls) -> GazetteerStore:
        """The bundled sample table."""
        return cls.from_csv(SAMPLE_GAZETTEER_PATH)
