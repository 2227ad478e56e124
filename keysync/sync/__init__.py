"""Reconciliation engine: inventories, delta computation and cycle orchestration."""

from .cycle import CycleReport, ReconciliationCycle
from .inventory import KeyInventory
from .reconciler import ReconciliationDelta, reconcile
from .scheduler import SyncScheduler
from .types import CycleState, InventoryProvider, KeyRecord, MutationOutcome, Mutator

__all__ = [
    "KeyRecord", "KeyInventory", "MutationOutcome", "CycleState",
    "InventoryProvider", "Mutator",
    "ReconciliationDelta", "reconcile",
    "ReconciliationCycle", "CycleReport", "SyncScheduler",
]
