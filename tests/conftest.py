"""Shared fixtures: in-memory providers and a fake signer/validator HTTP pair."""
import asyncio
import json
from collections.abc import Iterable
from typing import Optional

import httpx
import pytest

from keysync.client.exceptions import FetchError, MutationError
from keysync.config import HttpConfig, SyncConfig
from keysync.sync.inventory import KeyInventory
from keysync.sync.types import MutationOutcome

SIGNER_BASE = "http://signer:9000"
CLIENT_BASE = "http://validator:5062"


class StaticProvider:
    """InventoryProvider returning a fixed inventory or raising a fixed error."""

    def __init__(self, name: str, keys: Iterable[str] = (), error: Optional[Exception] = None) -> None:
        self.name = name
        self.inventory = KeyInventory.from_identifiers(keys)
        self.error = error
        self.calls = 0

    async def fetch(self) -> KeyInventory:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.inventory


class MemoryClient:
    """Client provider and mutator over an in-memory key set.

    ``fail_keys`` get an ``error`` status; ``import_error``/``delete_error``
    make the whole batch raise MutationError.
    """

    name = "client"

    def __init__(self, keys: Iterable[str] = (), fail_keys: Iterable[str] = (),
                 import_error: bool = False, delete_error: bool = False) -> None:
        self.keys = set(keys)
        self.fail_keys = set(fail_keys)
        self.import_error = import_error
        self.delete_error = delete_error
        self.addition_calls: list[frozenset[str]] = []
        self.removal_calls: list[frozenset[str]] = []

    async def fetch(self) -> KeyInventory:
        return KeyInventory.from_identifiers(self.keys)

    async def apply_additions(self, keys) -> list[MutationOutcome]:
        self.addition_calls.append(frozenset(keys))
        if self.import_error:
            raise MutationError("connection reset", operation="import")
        outcomes = []
        for k in sorted(keys):
            if k in self.fail_keys:
                outcomes.append(MutationOutcome(k, False, "signer unreachable", "error"))
            else:
                self.keys.add(k)
                outcomes.append(MutationOutcome(k, True, "", "imported"))
        return outcomes

    async def apply_removals(self, keys) -> list[MutationOutcome]:
        self.removal_calls.append(frozenset(keys))
        if self.delete_error:
            raise MutationError("connection reset", operation="delete")
        outcomes = []
        for k in sorted(keys):
            if k in self.fail_keys:
                outcomes.append(MutationOutcome(k, False, "locked", "error"))
            else:
                self.keys.discard(k)
                outcomes.append(MutationOutcome(k, True, "", "deleted"))
        return outcomes


class GatedProvider:
    """Provider whose fetch blocks until released."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.name = inner.name
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch(self) -> KeyInventory:
        self.entered.set()
        await self.release.wait()
        return await self._inner.fetch()


class FakeNodes:
    """Fake Web3Signer and validator client Keymanager APIs behind one MockTransport."""

    def __init__(self, signer_keys: Iterable[str] = (), client_keys: Iterable[str] = ()) -> None:
        self.signer_keys = list(signer_keys)
        self.client_keys = {k: SIGNER_BASE for k in client_keys}
        self.requests: list[httpx.Request] = []
        self.fail: dict[tuple[str, str], int] = {}
        self.forced_status: dict[str, str] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_to(self, host: str, method: Optional[str] = None) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host and (method is None or r.method == method)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.fail.get((request.method, request.url.host))
        if status is not None:
            return httpx.Response(status, json={"message": "unavailable"})
        path = request.url.path
        if request.url.host == "signer" and path == "/eth/v1/keystores" and request.method == "GET":
            return httpx.Response(200, json={"data": [
                {"validating_pubkey": k, "derivation_path": "", "readonly": False} for k in self.signer_keys]})
        if request.url.host == "validator" and path == "/eth/v1/remotekeys":
            if request.method == "GET":
                return httpx.Response(200, json={"data": [
                    {"pubkey": k, "url": u, "readonly": False} for k, u in self.client_keys.items()]})
            body = json.loads(request.content)
            if request.method == "POST":
                data = []
                for rk in body["remote_keys"]:
                    forced = self.forced_status.get(rk["pubkey"])
                    if forced:
                        data.append({"status": forced, "message": "forced"})
                    elif rk["pubkey"] in self.client_keys:
                        data.append({"status": "duplicate", "message": ""})
                    else:
                        self.client_keys[rk["pubkey"]] = rk["url"]
                        data.append({"status": "imported", "message": ""})
                return httpx.Response(200, json={"data": data})
            if request.method == "DELETE":
                data = []
                for pk in body["pubkeys"]:
                    forced = self.forced_status.get(pk)
                    if forced:
                        data.append({"status": forced, "message": "forced"})
                    elif self.client_keys.pop(pk, None) is not None:
                        data.append({"status": "deleted", "message": ""})
                    else:
                        data.append({"status": "not_found", "message": ""})
                return httpx.Response(200, json={"data": data})
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        env="production", web3signer_api_url=SIGNER_BASE, eth2_client_api_url=CLIENT_BASE,
        eth2_client_api_token="api-token-0123", interval_seconds=60.0,
        http=HttpConfig(timeout=5.0, max_retries=1),
    )


@pytest.fixture
def nodes() -> FakeNodes:
    return FakeNodes()


@pytest.fixture
def static_provider():
    return StaticProvider


@pytest.fixture
def memory_client():
    return MemoryClient


@pytest.fixture
def gated_provider():
    return GatedProvider


@pytest.fixture
def fetch_error() -> FetchError:
    return FetchError("Custodian listing returned HTTP 503", source="custodian")
