"""Type definitions shared by the reconciliation engine."""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from .inventory import KeyInventory


class CycleState(str, Enum):
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    MUTATING = "mutating"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class KeyRecord:
    """One signing key as listed by a custodian or client.

    Only ``identifier`` takes part in comparison; ``source_url`` and
    ``readonly`` ride along for mutation payloads and display.
    """
    identifier: str
    source_url: Optional[str] = None
    readonly: bool = False


@dataclass(frozen=True)
class MutationOutcome:
    """Per-key result of a batched add or remove call."""
    identifier: str
    succeeded: bool
    message: str = ""
    status: str = ""


class InventoryProvider(Protocol):
    name: str

    async def fetch(self) -> KeyInventory: ...


class Mutator(Protocol):
    async def apply_additions(self, keys: AbstractSet[str]) -> list[MutationOutcome]: ...

    async def apply_removals(self, keys: AbstractSet[str]) -> list[MutationOutcome]: ...
