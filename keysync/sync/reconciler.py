"""Delta computation between the custodian and client inventories."""

from __future__ import annotations

from dataclasses import dataclass, field

from .inventory import KeyInventory


@dataclass(frozen=True)
class ReconciliationDelta:
    to_add: frozenset[str] = field(default_factory=frozenset)
    to_remove: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def reconcile(custodian: KeyInventory, client: KeyInventory) -> ReconciliationDelta:
    """Compute which keys the client must gain and lose to match the custodian.

    Keys present on both sides are left alone whatever their URL or readonly
    flag. An empty custodian inventory yields removal of every client key.
    """
    wanted = custodian.identifiers
    loaded = client.identifiers
    return ReconciliationDelta(to_add=wanted - loaded, to_remove=loaded - wanted)
