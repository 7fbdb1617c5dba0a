"""SOL transfer commands."""

from __future__ import annotations

import logging

from solanize.cli.types import CommandRouter, CreateTx, Outcome, SendTx, Services, require_positive_amount
from solanize.core.errors import TransactionError
from solanize.solana.rpc import lamports_to_sol
from solanize.solana.transaction import (
    TransactionRequest,
    build_transfer,
    decode_transaction,
    encode_transaction,
    parse_address,
    transaction_signature,
)

logger = logging.getLogger(__name__)


def register(router: CommandRouter) -> None:
    """Register the transfer commands."""
    router.register(CreateTx, handle_create_tx, "Create a signed SOL transfer (optionally send it)")
    router.register(SendTx, handle_send_tx, "Broadcast transaction data produced by create-tx")


def handle_create_tx(command: CreateTx, services: Services) -> Outcome:
    require_positive_amount(command.amount)
    parse_address(command.to)

    wallet = services.wallet_store.load()
    request = TransactionRequest(sender=wallet.address, recipient=command.to.strip(), amount_sol=command.amount)
    available = services.rpc.get_balance(wallet.address)
    if available < request.lamports:
        raise TransactionError(
            f"Insufficient balance: {lamports_to_sol(available)} SOL available, {command.amount} SOL required."
        )

    blockhash = services.rpc.get_latest_blockhash()
    tx = build_transfer(wallet.keypair, request, blockhash)
    encoded = encode_transaction(tx)
    payload = {
        "transaction": encoded,
        "signature": transaction_signature(tx),
        "amount": command.amount,
        "to": request.recipient,
    }
    messages = [
        "Transaction created.",
        f"Amount: {command.amount} SOL",
        f"To: {request.recipient}",
        f"Transaction data: {encoded}",
    ]
    if not command.send:
        messages.append("Run `solanize send-tx --signature <data>` to broadcast it.")
        return Outcome.success(messages, payload=payload)

    signature, status = _broadcast(services, bytes(tx))
    payload.update(signature=signature, status=status)
    messages.extend([f"Transaction {status}.", f"Signature: {signature}"])
    return Outcome.success(messages, payload=payload)


def handle_send_tx(command: SendTx, services: Services) -> Outcome:
    tx = decode_transaction(command.signature_data)
    signature, status = _broadcast(services, bytes(tx))
    return Outcome.success(
        [f"Transaction {status}.", f"Signature: {signature}"],
        payload={"signature": signature, "status": status},
    )


def _broadcast(services: Services, raw: bytes) -> tuple[str, str]:
    signature = services.rpc.send_transaction(raw)
    logger.info("Waiting for confirmation of %s", signature)
    status = services.rpc.confirm(signature)
    return signature, status


__all__ = ["register"]
