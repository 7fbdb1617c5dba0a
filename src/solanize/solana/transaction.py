"""SOL transfer construction and transaction history."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any

import base58
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction, VersionedTransaction

from solanize.core.errors import NetworkError, ValidationError
from solanize.solana.rpc import SolanaRPCClient, lamports_to_sol, sol_to_lamports

logger = logging.getLogger(__name__)

PUBKEY_LENGTH = 32
HASH_LENGTH = 32
PENDING_SCAN_LIMIT = 20
# Balance moves at or below this are treated as fee noise.
TRANSFER_THRESHOLD_LAMPORTS = 1_000_000


@dataclass(frozen=True)
class TransactionRequest:
    """A SOL transfer from the wallet to `recipient`."""

    sender: str
    recipient: str
    amount_sol: float

    @property
    def lamports(self) -> int:
        return sol_to_lamports(self.amount_sol)


@dataclass
class TransactionRecord:
    """One entry of an address's transaction history."""

    signature: str
    status: str
    confirmation_status: str
    block_time: int | None = None
    slot: int | None = None
    fee: float | None = None
    amount: float | None = None
    token_symbol: str | None = None
    transaction_type: str = "unknown"
    error: str | None = None

    @property
    def short_signature(self) -> str:
        return self.signature[:8]


def parse_address(text: str) -> Pubkey:
    """Parse a base58 account address, raising ValidationError when malformed."""
    candidate = text.strip()
    try:
        raw = base58.b58decode(candidate) if candidate else b""
    except ValueError:
        raw = b""
    if len(raw) != PUBKEY_LENGTH:
        raise ValidationError(f"Invalid address: {text}")
    return Pubkey.from_bytes(raw)


def build_transfer(keypair: Keypair, request: TransactionRequest, blockhash: str) -> Transaction:
    """Build and sign a legacy system-program transfer."""
    recipient = parse_address(request.recipient)
    try:
        raw_hash = base58.b58decode(blockhash)
    except ValueError:
        raw_hash = b""
    if len(raw_hash) != HASH_LENGTH:
        raise NetworkError(f"Invalid blockhash from RPC: {blockhash}")
    recent_blockhash = Hash(raw_hash)
    instruction = transfer(
        TransferParams(from_pubkey=keypair.pubkey(), to_pubkey=recipient, lamports=request.lamports)
    )
    message = Message.new_with_blockhash([instruction], keypair.pubkey(), recent_blockhash)
    logger.info("Creating transaction: %s SOL to %s", request.amount_sol, request.recipient)
    return Transaction([keypair], message, recent_blockhash)


def encode_transaction(tx: Transaction) -> str:
    return base58.b58encode(bytes(tx)).decode("ascii")


def decode_transaction(text: str) -> Transaction:
    """Decode the base58 text produced by `encode_transaction`."""
    candidate = text.strip()
    if not candidate:
        raise ValidationError("Transaction data cannot be empty.")
    try:
        raw = base58.b58decode(candidate)
    except ValueError as exc:
        raise ValidationError("Transaction data is not valid base58.") from exc
    try:
        return Transaction.from_bytes(raw)
    except Exception as exc:  # noqa: BLE001
        raise ValidationError(f"Transaction data could not be decoded: {exc}") from exc


def transaction_signature(tx: Transaction) -> str:
    return str(tx.signatures[0])


def sign_swap_transaction(keypair: Keypair, encoded: str) -> bytes:
    """Sign the base64 versioned transaction returned by the swap API; return wire bytes."""
    try:
        raw = base64.b64decode(encoded, validate=True)
    except ValueError as exc:
        raise NetworkError("Swap transaction from aggregator is not valid base64") from exc
    try:
        unsigned = VersionedTransaction.from_bytes(raw)
    except Exception as exc:  # noqa: BLE001
        raise NetworkError(f"Malformed swap transaction from aggregator: {exc}") from exc
    signed = VersionedTransaction(unsigned.message, [keypair])
    return bytes(signed)


def analyze_transaction(tx: dict[str, Any] | None) -> tuple[float | None, str | None, str, float | None]:
    """Return (amount, symbol, type, fee) inferred from a jsonParsed transaction."""
    if not tx:
        return None, None, "unknown", None
    if not isinstance(tx, dict):
        raise NetworkError("Malformed RPC response; transaction is not an object")
    meta = tx.get("meta") or {}
    if not isinstance(meta, dict):
        raise NetworkError("Malformed RPC response; transaction meta is not an object")
    fee_lamports = meta.get("fee")
    fee = lamports_to_sol(fee_lamports) if isinstance(fee_lamports, int) else None
    pre_balances = meta.get("preBalances") or []
    post_balances = meta.get("postBalances") or []
    for pre, post in zip(pre_balances, post_balances):
        if not isinstance(pre, int) or not isinstance(post, int):
            raise NetworkError("Malformed RPC response; account balances must be integers")
        diff = post - pre
        if abs(diff) > TRANSFER_THRESHOLD_LAMPORTS:
            return lamports_to_sol(abs(diff)), "SOL", "transfer", fee
    return None, None, "unknown", fee


def _signature_of(info: Any) -> str:
    signature = info.get("signature") if isinstance(info, dict) else None
    if not isinstance(signature, str) or not signature:
        raise NetworkError("Malformed RPC response; signature entry has no signature")
    return signature


def _record_from_signature(info: dict[str, Any], tx: dict[str, Any] | None, *, pending: bool = False) -> TransactionRecord:
    amount, symbol, tx_type, fee = analyze_transaction(tx)
    err = info.get("err")
    if pending:
        status = "pending"
    else:
        status = "failed" if err is not None else "success"
    return TransactionRecord(
        signature=_signature_of(info),
        status=status,
        confirmation_status=info.get("confirmationStatus") or "finalized",
        block_time=info.get("blockTime"),
        slot=info.get("slot"),
        fee=fee,
        amount=amount,
        token_symbol=symbol,
        transaction_type=tx_type,
        error=None if err is None else str(err),
    )


def _safe_get_transaction(rpc: SolanaRPCClient, signature: str) -> dict[str, Any] | None:
    try:
        return rpc.get_transaction(signature)
    except NetworkError as exc:
        logger.debug("Transaction details unavailable for %s: %s", signature, exc)
        return None


def fetch_history(
    rpc: SolanaRPCClient,
    address: str,
    *,
    limit: int = 50,
    before: str | None = None,
) -> list[TransactionRecord]:
    logger.info("Fetching transaction history for %s, limit: %d", address, limit)
    signatures = rpc.get_signatures_for_address(address, limit=limit, before=before)
    records = [_record_from_signature(info, _safe_get_transaction(rpc, _signature_of(info))) for info in signatures]
    logger.info("Found %d transactions", len(records))
    return records


def fetch_pending(rpc: SolanaRPCClient, address: str) -> list[TransactionRecord]:
    logger.info("Fetching pending transactions for %s", address)
    signatures = rpc.get_signatures_for_address(address, limit=PENDING_SCAN_LIMIT)
    records: list[TransactionRecord] = []
    for info in signatures:
        signature = _signature_of(info)
        if info.get("confirmationStatus") != "processed":
            continue
        records.append(_record_from_signature(info, _safe_get_transaction(rpc, signature), pending=True))
    logger.info("Found %d pending transactions", len(records))
    return records


__all__ = [
    "TransactionRecord",
    "TransactionRequest",
    "analyze_transaction",
    "build_transfer",
    "decode_transaction",
    "encode_transaction",
    "fetch_history",
    "fetch_pending",
    "parse_address",
    "sign_swap_transaction",
    "transaction_signature",
]
