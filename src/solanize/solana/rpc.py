"""Solana JSON-RPC helpers."""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from solanize.core.errors import (
    ConfirmationTimeoutError,
    InsufficientFaucetError,
    NetworkError,
    TransactionError,
)

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGCPFXbfqKRtQp1hjwA8vr2Gx"
MAX_SIGNATURE_LIMIT = 1000

COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}
_FAUCET_LIMIT_HINTS = ("rate limit", "airdrop request limit", "too many requests", "faucet has run dry")


def sol_to_lamports(amount: float) -> int:
    return int(round(amount * LAMPORTS_PER_SOL))


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL


class _RPCFault(Exception):
    """JSON-RPC error object returned by the node."""

    def __init__(self, code: int | None, message: str, status_code: int = 200) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


RequestFn = Callable[..., httpx.Response]


@dataclass
class SolanaRPCClient:
    """Thin wrapper around Solana's JSON-RPC interface."""

    endpoint: str
    commitment: str = "confirmed"
    timeout: float = 10.0
    _request: RequestFn | None = None
    _sleep: Callable[[float], None] = time.sleep
    _clock: Callable[[], float] = time.monotonic

    def __post_init__(self) -> None:
        if self._request is None:
            self._request = httpx.post
        self._next_id = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_balance(self, address: str) -> int:
        """Return balance for `address` in lamports."""
        result = self._call("getBalance", [address, {"commitment": self.commitment}])
        lamports = self._value(result)
        if not isinstance(lamports, int):
            raise NetworkError("Balance value is not an integer")
        logger.debug("Fetched balance %d lamports for %s", lamports, address)
        return lamports

    def request_airdrop(self, address: str, lamports: int) -> str:
        """Ask the faucet for `lamports` and return the airdrop signature."""
        try:
            result = self._call("requestAirdrop", [address, lamports, {"commitment": self.commitment}], raw_faults=True)
        except _RPCFault as fault:
            if _is_faucet_limit(fault):
                raise InsufficientFaucetError(
                    f"Airdrop rejected: {fault.message}. The faucet may be rate-limited; try again later or request less."
                ) from fault
            raise NetworkError(f"Airdrop failed: {fault.message}") from fault
        if not isinstance(result, str):
            raise NetworkError("Malformed RPC response; missing airdrop signature")
        logger.info("Airdrop of %d lamports requested for %s: %s", lamports, address, result)
        return result

    def send_transaction(self, raw: bytes) -> str:
        """Submit a signed wire-format transaction and return its signature."""
        encoded = base64.b64encode(raw).decode("ascii")
        params = [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}]
        try:
            result = self._call("sendTransaction", params, raw_faults=True)
        except _RPCFault as fault:
            if fault.status_code >= 500:
                raise NetworkError(f"RPC request failed: {fault.message}") from fault
            raise TransactionError(fault.message) from fault
        if not isinstance(result, str):
            raise NetworkError("Malformed RPC response; missing transaction signature")
        logger.info("Transaction submitted: %s", result)
        return result

    def confirm(
        self,
        signature: str,
        commitment: str | None = None,
        *,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
    ) -> str:
        """Poll until `signature` reaches `commitment`; return the status reached."""
        target = commitment or self.commitment
        wanted = COMMITMENT_RANK.get(target, COMMITMENT_RANK["confirmed"])
        deadline = self._clock() + timeout
        while True:
            result = self._call("getSignatureStatuses", [[signature], {"searchTransactionHistory": False}])
            statuses = self._value(result)
            status = statuses[0] if isinstance(statuses, list) and statuses else None
            if isinstance(status, dict):
                if status.get("err") is not None:
                    raise TransactionError(f"Transaction {signature} failed: {status['err']}")
                reached = status.get("confirmationStatus") or "processed"
                if COMMITMENT_RANK.get(reached, -1) >= wanted:
                    logger.debug("Signature %s reached %s", signature, reached)
                    return reached
            if self._clock() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Signature {signature} not {target} after {timeout:.0f}s; it may still land."
                )
            self._sleep(poll_interval)

    def get_latest_blockhash(self) -> str:
        result = self._call("getLatestBlockhash", [{"commitment": self.commitment}])
        value = self._value(result)
        try:
            return value["blockhash"]
        except (KeyError, TypeError) as exc:
            raise NetworkError("Malformed RPC response; missing blockhash") from exc

    def get_token_accounts_by_owner(self, owner: str) -> list[dict[str, Any]]:
        result = self._call(
            "getTokenAccountsByOwner",
            [owner, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )
        accounts = self._value(result)
        if not isinstance(accounts, list):
            raise NetworkError("Malformed RPC response; token accounts are not a list")
        return accounts

    def get_signatures_for_address(
        self,
        address: str,
        *,
        limit: int = 50,
        before: str | None = None,
    ) -> list[dict[str, Any]]:
        options: dict[str, Any] = {"limit": max(1, min(limit, MAX_SIGNATURE_LIMIT)), "commitment": "confirmed"}
        if before:
            options["before"] = before
        result = self._call("getSignaturesForAddress", [address, options])
        if not isinstance(result, list):
            raise NetworkError("Malformed RPC response; signatures are not a list")
        return result

    def get_transaction(self, signature: str) -> dict[str, Any] | None:
        return self._call(
            "getTransaction",
            [
                signature,
                {"encoding": "jsonParsed", "commitment": "confirmed", "maxSupportedTransactionVersion": 0},
            ],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _call(self, method: str, params: list[Any], *, raw_faults: bool = False) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        try:
            response = self._request(self.endpoint, json=payload, timeout=self.timeout)  # type: ignore[misc]
        except httpx.HTTPError as exc:
            raise NetworkError(f"RPC request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = _error_message(data) or f"HTTP {response.status_code}"
            if raw_faults:
                raise _RPCFault(response.status_code, message, status_code=response.status_code)
            raise NetworkError(f"RPC request failed: {message}")

        if not isinstance(data, dict):
            raise NetworkError("Invalid JSON in RPC response")

        if "error" in data:
            error = data["error"] if isinstance(data["error"], dict) else {}
            message = error.get("message", "Unknown RPC error")
            if raw_faults:
                raise _RPCFault(error.get("code"), message)
            raise NetworkError(message)

        if "result" not in data:
            raise NetworkError(f"Malformed RPC response for {method}")
        return data["result"]

    @staticmethod
    def _value(result: Any) -> Any:
        try:
            return result["value"]
        except (KeyError, TypeError) as exc:
            raise NetworkError("Malformed RPC response; missing value") from exc


def _error_message(data: Any) -> str | None:
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message")
    return None


def _is_faucet_limit(fault: _RPCFault) -> bool:
    if fault.status_code == 429 or fault.code == 429:
        return True
    lowered = fault.message.lower()
    return any(hint in lowered for hint in _FAUCET_LIMIT_HINTS)


__all__ = [
    "LAMPORTS_PER_SOL",
    "COMMITMENT_RANK",
    "SolanaRPCClient",
    "lamports_to_sol",
    "sol_to_lamports",
]
