"""Tests for frameattest.relay: Syndicate mint requests."""

import json

import httpx
import pytest

from frameattest.errors import RelayError
from frameattest.relay import MINT_SIGNATURE, SyndicateMinter

CONTRACT = "0x" + "cd" * 20


def make_minter(mock_http, handler):
    return SyndicateMinter("syn-key", "project-1", CONTRACT, mock_http(handler),
                           base_url="https://syndicate.test")


@pytest.mark.asyncio
async def test_mint_sends_transaction(mock_http):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"transactionId": "tx-abc"})

    tx_id = await make_minter(mock_http, handler).mint("0xAAA")

    assert tx_id == "tx-abc"
    assert seen["path"] == "/transact/sendTransaction"
    assert seen["auth"] == "Bearer syn-key"
    assert seen["body"] == {
        "projectId": "project-1",
        "contractAddress": CONTRACT,
        "chainId": 8453,
        "functionSignature": MINT_SIGNATURE,
        "args": {"to": "0xAAA"},
    }


@pytest.mark.asyncio
async def test_mint_requires_recipient(mock_http):
    def handler(request):
        raise AssertionError("relay must not be called")

    with pytest.raises(RelayError) as exc:
        await make_minter(mock_http, handler).mint("")
    assert exc.value.submitted is False


@pytest.mark.asyncio
async def test_relay_refusal_is_not_submitted(mock_http):
    def handler(request):
        return httpx.Response(401, json={"message": "bad key"})

    with pytest.raises(RelayError) as exc:
        await make_minter(mock_http, handler).mint("0xAAA")
    assert exc.value.submitted is False
    assert "401" in str(exc.value)


@pytest.mark.asyncio
async def test_unreachable_relay_is_unknown(mock_http):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RelayError) as exc:
        await make_minter(mock_http, handler).mint("0xAAA")
    assert exc.value.submitted is True


@pytest.mark.asyncio
async def test_answer_without_transaction_id(mock_http):
    def handler(request):
        return httpx.Response(200, json={"ok": True})

    with pytest.raises(RelayError):
        await make_minter(mock_http, handler).mint("0xAAA")
