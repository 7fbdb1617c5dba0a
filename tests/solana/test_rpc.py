from __future__ import annotations

import base64
from typing import Any

import httpx
import pytest

from solanize.core.errors import (
    ConfirmationTimeoutError,
    InsufficientFaucetError,
    NetworkError,
    TransactionError,
)
from solanize.solana.rpc import SolanaRPCClient, lamports_to_sol, sol_to_lamports


def make_response(status_code: int, json_data: Any) -> httpx.Response:
    request = httpx.Request("POST", "https://rpc.example.com")
    return httpx.Response(status_code=status_code, json=json_data, request=request)


def rpc_result(result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": 1}


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_sol_lamport_conversions() -> None:
    assert sol_to_lamports(1.5) == 1_500_000_000
    assert sol_to_lamports(0.1) == 100_000_000
    assert lamports_to_sol(2_500_000_000) == 2.5


def test_get_balance_success() -> None:
    seen: list[dict[str, Any]] = []

    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        seen.append(json)
        return make_response(200, {"jsonrpc": "2.0", "result": {"value": 2_500_000_000}, "id": json["id"]})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", commitment="finalized", _request=request)

    balance = client.get_balance("TestPubkey")

    assert balance == 2_500_000_000
    assert seen[0]["method"] == "getBalance"
    assert seen[0]["params"] == ["TestPubkey", {"commitment": "finalized"}]


def test_get_balance_http_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(500, {"error": {"message": "fail"}})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(NetworkError):
        client.get_balance("TestPubkey")


def test_get_balance_rpc_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "error": {"message": "bad pubkey"}, "id": 1})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(NetworkError) as excinfo:
        client.get_balance("BadPubkey")
    assert "bad pubkey" in str(excinfo.value)


def test_transport_failure_raises_network_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        raise httpx.ConnectError("connection refused")

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(NetworkError):
        client.get_latest_blockhash()


def test_request_airdrop_returns_signature() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        assert json["params"][:2] == ["TestPubkey", 1_000_000_000]
        return make_response(200, rpc_result("AirdropSig"))

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    assert client.request_airdrop("TestPubkey", 1_000_000_000) == "AirdropSig"


def test_request_airdrop_rate_limited_by_status() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(429, {"error": {"code": 429, "message": "Too many requests"}})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(InsufficientFaucetError):
        client.request_airdrop("TestPubkey", 1_000_000_000)


def test_request_airdrop_rate_limited_by_message() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(
            200,
            {"jsonrpc": "2.0", "error": {"code": -32603, "message": "airdrop request limit reached"}, "id": 1},
        )

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(InsufficientFaucetError):
        client.request_airdrop("TestPubkey", 1_000_000_000)


def test_request_airdrop_other_fault_is_network_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, {"jsonrpc": "2.0", "error": {"code": -32602, "message": "Invalid param"}, "id": 1})

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(NetworkError):
        client.request_airdrop("TestPubkey", 1)


def test_send_transaction_encodes_base64() -> None:
    seen: list[dict[str, Any]] = []

    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        seen.append(json)
        return make_response(200, rpc_result("TxSig"))

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    assert client.send_transaction(b"\x01\x02\x03") == "TxSig"
    encoded, options = seen[0]["params"]
    assert base64.b64decode(encoded) == b"\x01\x02\x03"
    assert options == {"encoding": "base64", "preflightCommitment": "confirmed"}


def test_send_transaction_rpc_error_is_transaction_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(
            200,
            {"jsonrpc": "2.0", "error": {"code": -32002, "message": "Blockhash not found"}, "id": 1},
        )

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(TransactionError) as excinfo:
        client.send_transaction(b"\x00")
    assert "Blockhash not found" in str(excinfo.value)


def test_confirm_polls_until_commitment_reached() -> None:
    statuses = iter([None, {"confirmationStatus": "processed", "err": None}, {"confirmationStatus": "confirmed", "err": None}])

    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, rpc_result({"value": [next(statuses)]}))

    clock = FakeClock()
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request, _sleep=clock.sleep, _clock=clock)

    assert client.confirm("Sig", poll_interval=0.5) == "confirmed"
    assert clock.sleeps == [0.5, 0.5]


def test_confirm_accepts_higher_commitment() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, rpc_result({"value": [{"confirmationStatus": "finalized", "err": None}]}))

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    assert client.confirm("Sig", "processed") == "finalized"


def test_confirm_status_error_raises_transaction_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(
            200,
            rpc_result({"value": [{"confirmationStatus": "processed", "err": {"InstructionError": [0, "Custom"]}}]}),
        )

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(TransactionError):
        client.confirm("Sig")


def test_confirm_times_out() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, rpc_result({"value": [None]}))

    clock = FakeClock()
    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request, _sleep=clock.sleep, _clock=clock)

    with pytest.raises(ConfirmationTimeoutError):
        client.confirm("Sig", timeout=3.0, poll_interval=1.0)
    assert clock.now == 3.0


def test_get_signatures_for_address_caps_limit() -> None:
    seen: list[dict[str, Any]] = []

    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        seen.append(json)
        return make_response(200, rpc_result([]))

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    client.get_signatures_for_address("Addr", limit=5000, before="PrevSig")

    options = seen[0]["params"][1]
    assert options["limit"] == 1000
    assert options["before"] == "PrevSig"


def test_malformed_result_raises_network_error() -> None:
    def request(_url: str, *, json: dict[str, Any], timeout: float) -> httpx.Response:  # noqa: ARG001
        return make_response(200, rpc_result({"value": {"nothing": True}}))

    client = SolanaRPCClient(endpoint="https://rpc.example.com", _request=request)

    with pytest.raises(NetworkError):
        client.get_latest_blockhash()
