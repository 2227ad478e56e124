"""Key inventories: order-irrelevant sets of key records keyed by identifier."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from .types import KeyRecord


@dataclass(frozen=True)
class KeyInventory:
    """Immutable set of KeyRecords keyed by identifier.

    Built fresh from a provider listing every cycle. When a listing repeats an
    identifier the last occurrence wins.
    """

    _records: Mapping[str, KeyRecord] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # copy so later changes to the caller's dict never leak in
        object.__setattr__(self, "_records", MappingProxyType(dict(self._records)))

    @classmethod
    def from_records(cls, records: Iterable[KeyRecord]) -> KeyInventory:
        by_id: dict[str, KeyRecord] = {}
        for record in records:
            by_id[record.identifier] = record
        return cls(MappingProxyType(by_id))

    @classmethod
    def from_identifiers(cls, identifiers: Iterable[str]) -> KeyInventory:
        return cls.from_records(KeyRecord(identifier=i) for i in identifiers)

    @property
    def identifiers(self) -> frozenset[str]:
        return frozenset(self._records)

    def get(self, identifier: str) -> Optional[KeyRecord]:
        return self._records.get(identifier)

    def records(self) -> list[KeyRecord]:
        """Records sorted by identifier."""
        return [self._records[i] for i in sorted(self._records)]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyInventory):
            return NotImplemented
        return dict(self._records) == dict(other._records)

    def __hash__(self) -> int:
        return hash(frozenset(self._records.items()))
