"""Tests for the validator client provider and mutator."""

import json

import httpx
import pytest

from keysync.client.exceptions import FetchError, MutationError
from keysync.client.transport import Transport
from keysync.client.validator import ValidatorClient

K1 = "0x93247f2209abcacf57b75a51dafae777f9dd38bc7053d1af526f220a7489a6d3a2753e5f3e8b1cfe39b56f43611df74a"
K2 = "0x93247f2209abcacf57b75a51dafae777f9dd38bc7053d1af526f220a7489a6d3a2753e5f3e8b1cfe39b56fjfh3jcisp9"
K3 = "0x93247f2209abcacf57b75a51dafae777f9dd38bc7053d1af526f220a7489a6d3a2753e5f3e8b1cfe39b56fj4hc6s930p"
SIGNER = "https://remote.signer"


class Recorder:
    """MockTransport handler answering every request with one canned response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.response.status_code, headers=self.response.headers, content=self.response.content)

    def transport(self) -> Transport:
        return Transport(max_retries=1, transport=httpx.MockTransport(self))


class TestValidatorFetch:
    @pytest.mark.asyncio
    async def test_parses_remote_keys(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": [{"pubkey": K1, "url": SIGNER, "readonly": True}]}))
        async with rec.transport() as t:
            client = ValidatorClient(t, "http://validator:5062/", SIGNER)
            inv = await client.fetch()
        assert client.url == "http://validator:5062/eth/v1/remotekeys"
        assert inv.identifiers == {K1}
        assert inv.get(K1).source_url == SIGNER
        assert rec.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_url_and_readonly_optional(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": [{"pubkey": K1}]}))
        async with rec.transport() as t:
            inv = await ValidatorClient(t, "http://validator", SIGNER).fetch()
        assert inv.get(K1).source_url is None
        assert inv.get(K1).readonly is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(401, json={"message": "unauthorized"}),
        httpx.Response(200, text="oops"),
        httpx.Response(200, json={"data": [{"url": SIGNER}]}),
        httpx.Response(200, json={"data": "nope"}),
    ])
    async def test_bad_listing_raises_fetch_error(self, response: httpx.Response) -> None:
        async with Recorder(response).transport() as t:
            with pytest.raises(FetchError) as exc_info:
                await ValidatorClient(t, "http://validator", SIGNER).fetch()
        assert exc_info.value.source == "client"


class TestValidatorAdditions:
    @pytest.mark.asyncio
    async def test_single_batched_post(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": [
            {"status": "imported", "message": ""}, {"status": "duplicate", "message": "already loaded"}]}))
        async with rec.transport() as t:
            outcomes = await ValidatorClient(t, "http://validator", SIGNER).apply_additions({K2, K1})
        assert len(rec.requests) == 1
        request = rec.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"remote_keys": [
            {"pubkey": K1, "url": SIGNER}, {"pubkey": K2, "url": SIGNER}]}
        assert [(o.identifier, o.succeeded, o.status) for o in outcomes] == [
            (K1, True, "imported"), (K2, True, "duplicate")]
        assert outcomes[1].message == "already loaded"

    @pytest.mark.asyncio
    async def test_error_status_is_per_key_failure(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": [
            {"status": "imported"}, {"status": "error", "message": "invalid url"}]}))
        async with rec.transport() as t:
            outcomes = await ValidatorClient(t, "http://validator", SIGNER).apply_additions({K1, K2})
        assert outcomes[0].succeeded
        assert not outcomes[1].succeeded
        assert outcomes[1].message == "invalid url"

    @pytest.mark.asyncio
    async def test_empty_set_makes_no_request(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": []}))
        async with rec.transport() as t:
            assert await ValidatorClient(t, "http://validator", SIGNER).apply_additions(set()) == []
        assert rec.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, json={"message": "internal"}),
        httpx.Response(200, text="no json"),
        httpx.Response(200, json={"data": [{"message": "missing status"}]}),
        httpx.Response(200, json={"data": [{"status": "imported"}]}),
    ])
    async def test_incomplete_batch_raises_mutation_error(self, response: httpx.Response) -> None:
        async with Recorder(response).transport() as t:
            with pytest.raises(MutationError) as exc_info:
                await ValidatorClient(t, "http://validator", SIGNER).apply_additions({K1, K2})
        assert exc_info.value.operation == "import"


class TestValidatorRemovals:
    @pytest.mark.asyncio
    async def test_single_batched_delete(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": [
            {"status": "deleted", "message": ""}, {"status": "not_found", "message": ""},
            {"status": "error", "message": "locked"}]}))
        async with rec.transport() as t:
            outcomes = await ValidatorClient(t, "http://validator", SIGNER).apply_removals({K3, K1, K2})
        assert len(rec.requests) == 1
        assert rec.requests[0].method == "DELETE"
        submitted = sorted([K1, K2, K3])
        assert json.loads(rec.requests[0].content) == {"pubkeys": submitted}
        assert [(o.identifier, o.succeeded, o.status) for o in outcomes] == [
            (submitted[0], True, "deleted"), (submitted[1], True, "not_found"), (submitted[2], False, "error")]
        assert outcomes[2].message == "locked"

    @pytest.mark.asyncio
    async def test_transport_failure_raises_mutation_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out")

        async with Transport(max_retries=1, transport=httpx.MockTransport(refuse)) as t:
            with pytest.raises(MutationError, match="Delete request failed") as exc_info:
                await ValidatorClient(t, "http://validator", SIGNER).apply_removals({K1})
        assert exc_info.value.operation == "delete"

    @pytest.mark.asyncio
    async def test_length_mismatch_raises_mutation_error(self) -> None:
        rec = Recorder(httpx.Response(200, json={"data": []}))
        async with rec.transport() as t:
            with pytest.raises(MutationError, match="0 entries for 1 keys"):
                await ValidatorClient(t, "http://validator", SIGNER).apply_removals({K1})
