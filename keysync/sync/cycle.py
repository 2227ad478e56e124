"""One fetch, reconcile and mutate pass over the custodian and client inventories."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from collections.abc import Set as AbstractSet
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from keysync.client.exceptions import FetchError, MutationError

from .inventory import KeyInventory
from .reconciler import ReconciliationDelta, reconcile
from .types import CycleState, InventoryProvider, MutationOutcome, Mutator

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CycleReport:
    """Outcome of one ReconciliationCycle."""

    state: CycleState
    started_at: datetime
    finished_at: datetime
    dry_run: bool = False
    custodian_count: int = 0
    client_count: int = 0
    delta: ReconciliationDelta = field(default_factory=ReconciliationDelta)
    additions: tuple[MutationOutcome, ...] = ()
    removals: tuple[MutationOutcome, ...] = ()
    fetch_error: Optional[str] = None
    addition_error: Optional[str] = None
    removal_error: Optional[str] = None
    wipe_blocked: bool = False

    @property
    def added(self) -> int:
        return sum(1 for o in self.additions if o.succeeded)

    @property
    def removed(self) -> int:
        return sum(1 for o in self.removals if o.succeeded)

    @property
    def failed(self) -> int:
        """Keys whose mutation did not succeed, counting every key of a failed batch."""
        n = sum(1 for o in self.additions + self.removals if not o.succeeded)
        if self.addition_error:
            n += len(self.delta.to_add)
        if self.removal_error:
            n += len(self.delta.to_remove)
        return n

    @property
    def failed_batches(self) -> int:
        return int(self.addition_error is not None) + int(self.removal_error is not None)

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def summary(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "fetched": {"custodian": self.custodian_count, "client": self.client_count},
            "to_add": sorted(self.delta.to_add),
            "to_remove": sorted(self.delta.to_remove),
            "added": self.added,
            "removed": self.removed,
            "failed": self.failed,
            "failed_batches": self.failed_batches,
            "wipe_blocked": self.wipe_blocked,
            "errors": {k: v for k, v in (("fetch", self.fetch_error), ("additions", self.addition_error),
                                          ("removals", self.removal_error)) if v},
            "outcomes": [
                {"operation": op, "pubkey": o.identifier, "succeeded": o.succeeded, "status": o.status, "message": o.message}
                for op, outcomes in (("import", self.additions), ("delete", self.removals)) for o in outcomes
            ],
        }


class ReconciliationCycle:
    """Fetch both inventories, reconcile them and apply the delta to the client.

    A FetchError from either side aborts the cycle before any mutation. The
    additions and removals halves are attempted independently so a failed
    batch on one side never blocks the other. With ``allow_full_wipe`` False
    an empty custodian listing is not allowed to remove every client key.
    """

    def __init__(self, custodian: InventoryProvider, client: InventoryProvider, mutator: Mutator,
                 *, dry_run: bool = False, allow_full_wipe: bool = True) -> None:
        self._custodian = custodian
        self._client = client
        self._mutator = mutator
        self._dry_run = dry_run
        self._allow_full_wipe = allow_full_wipe
        self._state = CycleState.FETCHING

    @property
    def state(self) -> CycleState:
        return self._state

    async def fetch_custodian(self) -> KeyInventory:
        return await self._custodian.fetch()

    async def fetch_client(self) -> KeyInventory:
        return await self._client.fetch()

    def reconcile(self, custodian: KeyInventory, client: KeyInventory) -> ReconciliationDelta:
        return reconcile(custodian, client)

    async def apply_additions(self, keys: AbstractSet[str]) -> list[MutationOutcome]:
        if not keys:
            return []
        return await self._mutator.apply_additions(keys)

    async def apply_removals(self, keys: AbstractSet[str]) -> list[MutationOutcome]:
        if not keys:
            return []
        return await self._mutator.apply_removals(keys)

    async def run(self) -> CycleReport:
        started = _now()
        self._state = CycleState.FETCHING
        results = await asyncio.gather(self.fetch_custodian(), self.fetch_client(), return_exceptions=True)
        fetch_errors = []
        for result in results:
            if isinstance(result, FetchError):
                fetch_errors.append(result)
            elif isinstance(result, BaseException):
                raise result
        if fetch_errors:
            self._state = CycleState.ABORTED
            message = "; ".join(str(e) for e in fetch_errors)
            logger.error("Cycle aborted, nothing mutated: %s", message)
            return CycleReport(state=self._state, started_at=started, finished_at=_now(),
                               dry_run=self._dry_run, fetch_error=message)
        custodian_inv, client_inv = results
        logger.info("Fetched %d custodian key(s), %d client key(s)", len(custodian_inv), len(client_inv))

        self._state = CycleState.RECONCILING
        delta = self.reconcile(custodian_inv, client_inv)
        wipe_blocked = False
        if not custodian_inv and client_inv:
            if self._allow_full_wipe and self._dry_run:
                logger.warning("Custodian lists no keys; a live cycle would remove all %d client key(s)",
                               len(client_inv))
            elif self._allow_full_wipe:
                logger.warning("Custodian lists no keys; all %d client key(s) will be removed", len(client_inv))
            else:
                logger.warning("Custodian lists no keys; full wipe disabled, keeping %d client key(s)", len(client_inv))
                delta = ReconciliationDelta(to_add=delta.to_add, to_remove=frozenset())
                wipe_blocked = True
        logger.debug("Delta to_add=%s to_remove=%s", sorted(delta.to_add), sorted(delta.to_remove))

        report_args: dict[str, Any] = dict(started_at=started, dry_run=self._dry_run,
            custodian_count=len(custodian_inv), client_count=len(client_inv), delta=delta, wipe_blocked=wipe_blocked)
        if self._dry_run:
            self._state = CycleState.DONE
            logger.info("Dry run: would add %d and remove %d key(s)", len(delta.to_add), len(delta.to_remove))
            return CycleReport(state=self._state, finished_at=_now(), **report_args)
        if delta.is_empty:
            logger.info("Keys in sync, nothing to do")

        self._state = CycleState.MUTATING
        halves = await asyncio.gather(
            self._mutate("import", self.apply_additions, delta.to_add),
            self._mutate("delete", self.apply_removals, delta.to_remove),
            return_exceptions=True,
        )
        for half in halves:
            if isinstance(half, BaseException):
                raise half
        (additions, addition_error), (removals, removal_error) = halves

        self._state = CycleState.DONE
        report = CycleReport(state=self._state, finished_at=_now(), additions=tuple(additions),
                             removals=tuple(removals), addition_error=addition_error,
                             removal_error=removal_error, **report_args)
        logger.info("Cycle done: fetched custodian=%d client=%d added=%d removed=%d failed=%d",
                    report.custodian_count, report.client_count, report.added, report.removed, report.failed)
        return report

    async def _mutate(self, operation: str, apply: Callable[[AbstractSet[str]], Awaitable[list[MutationOutcome]]],
                      keys: frozenset[str]) -> tuple[list[MutationOutcome], Optional[str]]:
        try:
            return await apply(keys), None
        except MutationError as e:
            logger.error("%s batch of %d key(s) failed: %s", operation.capitalize(), len(keys), e)
            return [], str(e)
