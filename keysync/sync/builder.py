"""Wires ReconciliationCycles from configuration."""

from __future__ import annotations

import functools
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import httpx

from keysync.client.custodian import CustodianProvider
from keysync.client.transport import Transport
from keysync.client.validator import ValidatorClient
from keysync.config import SyncConfig

from .cycle import ReconciliationCycle
from .scheduler import CycleFactory


@asynccontextmanager
async def open_cycle(config: SyncConfig, *, dry_run: Optional[bool] = None,
                     http_transport: Optional[httpx.AsyncBaseTransport] = None) -> AsyncIterator[ReconciliationCycle]:
    """Open fresh HTTP transports and yield a cycle bound to them.

    The Keymanager token is only ever sent to the validator client.
    """
    signer = Transport(config.http.timeout, config.http.max_retries, transport=http_transport)
    client = Transport(config.http.timeout, config.http.max_retries,
                       token=config.eth2_client_api_token, transport=http_transport)
    async with signer, client:
        custodian = CustodianProvider(signer, config.web3signer_api_url, config.effective_signer_url)
        validator = ValidatorClient(client, config.eth2_client_api_url, config.effective_signer_url)
        yield ReconciliationCycle(
            custodian, validator, validator,
            dry_run=config.dry_run if dry_run is None else dry_run,
            allow_full_wipe=config.allow_full_wipe,
        )


def cycle_factory(config: SyncConfig, **kwargs) -> CycleFactory:
    return functools.partial(open_cycle, config, **kwargs)
