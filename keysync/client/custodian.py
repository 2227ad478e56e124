"""Custodian inventory provider backed by the Web3Signer keymanager API."""

import logging
from typing import Optional

from pydantic import ValidationError

from keysync.sync.inventory import KeyInventory
from keysync.sync.types import KeyRecord

from .exceptions import FetchError, TransportError
from .models import SignerKeystoreListing
from .transport import Transport

logger = logging.getLogger(__name__)

KEYSTORES_PATH = "/eth/v1/keystores"


class CustodianProvider:
    """Lists the keys held by a remote signer.

    ``signer_url`` is the address the validator client should use to reach the
    signer; it defaults to ``base_url`` and is stamped on every KeyRecord.
    """

    name = "custodian"

    def __init__(self, transport: Transport, base_url: str, signer_url: Optional[str] = None) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._signer_url = (signer_url or base_url).rstrip("/")
        self._url = self._base_url + KEYSTORES_PATH

    @property
    def url(self) -> str:
        return self._url

    @property
    def signer_url(self) -> str:
        return self._signer_url

    async def fetch(self) -> KeyInventory:
        try:
            status, body = await self._transport.get(self._url)
        except TransportError as e:
            raise FetchError(f"Custodian listing unreachable: {e}", source=self.name) from e
        if not 200 <= status < 300:
            raise FetchError(f"Custodian listing returned HTTP {status}", source=self.name)
        if body is None:
            raise FetchError("Custodian listing returned no JSON body", source=self.name)
        try:
            listing = SignerKeystoreListing.model_validate(body)
        except ValidationError as e:
            raise FetchError(f"Malformed custodian listing: {e}", source=self.name) from e
        inventory = KeyInventory.from_records(
            KeyRecord(identifier=k.validating_pubkey, source_url=self._signer_url, readonly=k.readonly)
            for k in listing.data
        )
        if len(inventory) != len(listing.data):
            logger.warning("Custodian listing repeated %d key(s)", len(listing.data) - len(inventory))
        logger.debug("Custodian keys: %s", list(inventory))
        return inventory
