"""
Tests for SolanaRpcClient over httpx.MockTransport.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from backend_sivic.core.exceptions import RpcError
from backend_sivic.solana_rpc.client import SolanaRpcClient

RPC_URL = "https://rpc.test"
VALID_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
PROGRAM_DATA = "4MangoMjqJ2firMokCjjGgoK8d4MXcrgL7XJaL3w6fVg"
AUTHORITY = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


def _rpc(handler, call, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = SolanaRpcClient(http, RPC_URL, min_retry_delay_sec=0, **kwargs)
            return await call(client)

    return asyncio.run(go())


def _result(value):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": value})

    return handler


def test_constructor_validates_arguments():
    http = httpx.AsyncClient()
    with pytest.raises(ValueError):
        SolanaRpcClient(http, "  ")
    with pytest.raises(ValueError):
        SolanaRpcClient(http, RPC_URL, max_retries=0)


def test_get_account_info_parses_mint():
    """jsonParsed mint value becomes an AccountInfo with mint fields."""
    value = {
        "owner": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
        "executable": False,
        "lamports": 1461600,
        "data": {"parsed": {"type": "mint", "info": {"decimals": 5, "supply": "100000", "mintAuthority": None}}},
    }
    account = _rpc(_result({"value": value}), lambda c: c.get_account_info(VALID_MINT))
    assert account.is_mint
    mint = account.mint_info()
    assert mint.decimals == 5
    assert mint.ui_supply == 1.0
    assert mint.mint_authority is None


def test_get_account_info_missing_is_none():
    assert _rpc(_result({"value": None}), lambda c: c.get_account_info(VALID_MINT)) is None


def test_get_program_data_reads_authority():
    value = {
        "owner": "BPFLoaderUpgradeab1e11111111111111111111111",
        "executable": False,
        "lamports": 1,
        "data": {"parsed": {"type": "programData", "info": {"authority": AUTHORITY, "slot": 123}}},
    }
    info = _rpc(_result({"value": value}), lambda c: c.get_program_data(PROGRAM_DATA))
    assert info.authority == AUTHORITY
    assert info.slot == 123


def test_json_rpc_error_raises_rpc_error():
    """An `error` object is raised as RpcError with its code."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}})

    with pytest.raises(RpcError) as exc:
        _rpc(handler, lambda c: c.get_token_largest_accounts(VALID_MINT))
    assert exc.value.rpc_code == -32602
    assert "Invalid param" in exc.value.message


def test_transport_errors_retry_then_raise():
    """Transport failures are retried max_retries times, then raised."""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RpcError):
        _rpc(handler, lambda c: c.get_account_info(VALID_MINT), max_retries=3)
    assert len(attempts) == 3


def test_retry_recovers_after_http_503():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 2, "result": {"value": None}})

    assert _rpc(handler, lambda c: c.get_account_info(VALID_MINT)) is None
    assert len(attempts) == 2


def test_largest_accounts_and_signatures():
    """Holder items keep raw amounts; malformed signature items are skipped."""
    holders = {"value": [{"address": AUTHORITY, "amount": "600", "decimals": 6, "uiAmount": 0.0006}]}
    balances = _rpc(_result(holders), lambda c: c.get_token_largest_accounts(VALID_MINT))
    assert balances[0].amount == "600"
    assert balances[0].ui_amount == 0.0006

    sigs = [
        {"signature": "a", "slot": 1, "err": None, "blockTime": 10},
        {"signature": "b", "slot": 2, "err": {"InstructionError": [0, "Custom"]}},
        {"slot": 3},
    ]
    infos = _rpc(_result(sigs), lambda c: c.get_signatures_for_address(VALID_MINT, 100))
    assert [s.signature for s in infos] == ["a", "b"]
    assert [s.failed for s in infos] == [False, True]


def test_signature_limit_bounds():
    with pytest.raises(ValueError):
        _rpc(_result([]), lambda c: c.get_signatures_for_address(VALID_MINT, 1001))
