"""Hierarchical lookup index over a gazetteer store."""

from __future__ import annotations

from alamat_parser.gazetteer.store import GazetteerStore
from alamat_parser.preprocessing.normalizer import normalize_text
from alamat_parser.schemas import ADMIN_LEVELS, AddressRecord


class HierarchicalIndex:
    """
    Four name -> records maps, one per administrative level.

    Keys are normalized names; values are positions into the store, in
    insertion order. Read-only once built.
    """

    def __init__(self, store: GazetteerStore):
        self.store = store
        self._levels: dict[str, dict[str, list[int]]] = {level: {} for level in ADMIN_LEVELS}

        for position, record in enumerate(store):
            for level in ADMIN_LEVELS:
                key = normalize_text(record.get(level))
                if key:
                    self._levels[level].setdefault(key, []).append(position)

    def lookup(self, level: str, name: str | None) -> list[AddressRecord]:
        """All records whose `level` field normalizes to `name`."""
        positions = self._levels[level].get(normalize_text(name), [])
        return [self.store[p] for p in positions]

    def first(self, level: str, name: str | None) -> AddressRecord | None:
        """First record under `name`, or None."""
        positions = self._levels[level].get(normalize_text(name))
        return self.store[positions[0]] if positions else None

    def contains(self, level: str, name: str | None) -> bool:
        return normalize_text(name) in self._levels[level]

    def keys(self, level: str) -> list[str]:
        """Normalized names at a level, in insertion order."""
        return list(self._levels[level])

    def canonical_name(self, level: str, key: str) -> str | None:
        """Original-cased name of the first record under `key`."""
        record = self.first(level, key)
        return record.get(level) if record else None

    def level_size(self, level: str) -> int:
        return len(self._levels[level])

    def __len__(self) -> int:
        return len(self.store)
