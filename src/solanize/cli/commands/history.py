"""Transaction history commands."""

from __future__ import annotations

from datetime import UTC, datetime

from rich.table import Table

from solanize.cli.types import CommandRouter, History, Outcome, Pending, Services
from solanize.core.errors import ValidationError
from solanize.solana.rpc import MAX_SIGNATURE_LIMIT
from solanize.solana.transaction import TransactionRecord, fetch_history, fetch_pending, parse_address


def register(router: CommandRouter) -> None:
    """Register the history commands."""
    router.register(History, handle_history, "Show recent transactions for an address")
    router.register(Pending, handle_pending, "Show transactions still at processed commitment")


def handle_history(command: History, services: Services) -> Outcome:
    if not 0 < command.limit <= MAX_SIGNATURE_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_SIGNATURE_LIMIT}.")
    address = _target_address(command.address, services)
    records = fetch_history(services.rpc, address, limit=command.limit, before=command.before)
    payload = {"address": address, "transactions": [_record_payload(record) for record in records]}
    if not records:
        return Outcome.success([f"No transactions found for {address}."], payload=payload)
    return Outcome.success(
        [f"{len(records)} transaction(s) for {address}."],
        payload=payload,
        table=_records_table("Transaction history", records),
    )


def handle_pending(command: Pending, services: Services) -> Outcome:
    address = _target_address(command.address, services)
    records = fetch_pending(services.rpc, address)
    payload = {"address": address, "transactions": [_record_payload(record) for record in records]}
    if not records:
        return Outcome.success([f"No pending transactions for {address}."], payload=payload)
    return Outcome.success(
        [f"{len(records)} pending transaction(s) for {address}."],
        payload=payload,
        table=_records_table("Pending transactions", records),
    )


def _target_address(explicit: str | None, services: Services) -> str:
    if explicit:
        return str(parse_address(explicit))
    return services.wallet_store.load().address


def _format_time(block_time: int | None) -> str:
    if block_time is None:
        return "-"
    return datetime.fromtimestamp(block_time, UTC).strftime("%Y-%m-%d %H:%M:%S")


def _records_table(title: str, records: list[TransactionRecord]) -> Table:
    table = Table(title=title)
    table.add_column("Signature")
    table.add_column("Time (UTC)")
    table.add_column("Status")
    table.add_column("Type")
    table.add_column("Amount", justify="right")
    table.add_column("Fee", justify="right")
    for record in records:
        amount = "-" if record.amount is None else f"{record.amount} {record.token_symbol or ''}".strip()
        fee = "-" if record.fee is None else f"{record.fee:.6f}"
        table.add_row(
            record.short_signature,
            _format_time(record.block_time),
            record.status,
            record.transaction_type,
            amount,
            fee,
        )
    return table


def _record_payload(record: TransactionRecord) -> dict[str, object]:
    return {
        "signature": record.signature,
        "status": record.status,
        "confirmation_status": record.confirmation_status,
        "block_time": record.block_time,
        "slot": record.slot,
        "fee": record.fee,
        "amount": record.amount,
        "token_symbol": record.token_symbol,
        "transaction_type": record.transaction_type,
        "error": record.error,
    }


__all__ = ["register"]
