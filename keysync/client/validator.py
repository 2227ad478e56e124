"""Validator client inventory provider and mutator (Keymanager remote keys API)."""

import logging
from collections.abc import Set as AbstractSet
from typing import Any

from pydantic import ValidationError

from keysync.sync.inventory import KeyInventory
from keysync.sync.types import KeyRecord, MutationOutcome

from .exceptions import FetchError, MutationError, TransportError
from .models import (
    DeleteRemoteKeysRequest,
    ImportRemoteKey,
    ImportRemoteKeysRequest,
    KeyStatusResponse,
    RemoteKeyListing,
)
from .transport import Transport

logger = logging.getLogger(__name__)

REMOTEKEYS_PATH = "/eth/v1/remotekeys"

IMPORT_OK = frozenset(("imported", "duplicate"))
DELETE_OK = frozenset(("deleted", "not_found"))


class ValidatorClient:
    """Reads and edits the remote keys loaded by a validator client.

    Additions and removals are each sent as one batched request carrying the
    whole key set. Per-key failures come back as unsuccessful outcomes; only a
    batch that cannot complete raises MutationError.
    """

    name = "client"

    def __init__(self, transport: Transport, base_url: str, signer_url: str) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._signer_url = signer_url.rstrip("/")
        self._url = self._base_url + REMOTEKEYS_PATH

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> KeyInventory:
        try:
            status, body = await self._transport.get(self._url)
        except TransportError as e:
            raise FetchError(f"Client listing unreachable: {e}", source=self.name) from e
        if not 200 <= status < 300:
            raise FetchError(f"Client listing returned HTTP {status}", source=self.name)
        if body is None:
            raise FetchError("Client listing returned no JSON body", source=self.name)
        try:
            listing = RemoteKeyListing.model_validate(body)
        except ValidationError as e:
            raise FetchError(f"Malformed client listing: {e}", source=self.name) from e
        inventory = KeyInventory.from_records(
            KeyRecord(identifier=k.pubkey, source_url=k.url, readonly=k.readonly) for k in listing.data
        )
        if len(inventory) != len(listing.data):
            logger.warning("Client listing repeated %d key(s)", len(listing.data) - len(inventory))
        logger.debug("Client keys: %s", list(inventory))
        return inventory

    async def apply_additions(self, keys: AbstractSet[str]) -> list[MutationOutcome]:
        if not keys:
            return []
        pubkeys = sorted(keys)
        request = ImportRemoteKeysRequest(
            remote_keys=[ImportRemoteKey(pubkey=k, url=self._signer_url) for k in pubkeys])
        logger.info("Importing %d remote key(s) into %s", len(pubkeys), self._base_url)
        try:
            status, body = await self._transport.post(self._url, request.model_dump())
        except TransportError as e:
            raise MutationError(f"Import request failed: {e}", operation="import") from e
        return self._outcomes("import", pubkeys, status, body, IMPORT_OK)

    async def apply_removals(self, keys: AbstractSet[str]) -> list[MutationOutcome]:
        if not keys:
            return []
        pubkeys = sorted(keys)
        request = DeleteRemoteKeysRequest(pubkeys=pubkeys)
        logger.info("Deleting %d remote key(s) from %s", len(pubkeys), self._base_url)
        try:
            status, body = await self._transport.delete(self._url, request.model_dump())
        except TransportError as e:
            raise MutationError(f"Delete request failed: {e}", operation="delete") from e
        return self._outcomes("delete", pubkeys, status, body, DELETE_OK)

    def _outcomes(self, operation: str, pubkeys: list[str], status: int, body: Any,
                  ok_statuses: frozenset[str]) -> list[MutationOutcome]:
        if not 200 <= status < 300:
            raise MutationError(f"{operation.capitalize()} request returned HTTP {status}", operation=operation)
        if body is None:
            raise MutationError(f"{operation.capitalize()} response had no JSON body", operation=operation)
        try:
            response = KeyStatusResponse.model_validate(body)
        except ValidationError as e:
            raise MutationError(f"Malformed {operation} response: {e}", operation=operation) from e
        if len(response.data) != len(pubkeys):
            raise MutationError(
                f"{operation.capitalize()} response has {len(response.data)} entries for {len(pubkeys)} keys",
                operation=operation)
        outcomes = [
            MutationOutcome(identifier=k, succeeded=s.status in ok_statuses, message=s.message or "", status=s.status)
            for k, s in zip(pubkeys, response.data)
        ]
        for o in outcomes:
            if not o.succeeded:
                logger.warning("%s of %s failed: %s %s", operation, o.identifier, o.status, o.message)
        return outcomes
