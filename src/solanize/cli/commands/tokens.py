"""Token discovery and wallet holdings commands."""

from __future__ import annotations

from rich.table import Table

from solanize.cli.types import CommandRouter, ListTokens, Outcome, Search, Services
from solanize.core.errors import ValidationError
from solanize.solana.balances import fetch_token_balances, format_balance


def register(router: CommandRouter) -> None:
    """Register the token commands."""
    router.register(Search, handle_search, "Search the Jupiter token list")
    router.register(ListTokens, handle_list_tokens, "List tokens held by the wallet")


def handle_search(command: Search, services: Services) -> Outcome:
    query = command.query.strip()
    if not query:
        raise ValidationError("Search query cannot be empty.")
    results = services.jupiter.search(query)
    payload = {"query": query, "results": [token.model_dump() for token in results]}
    if not results:
        return Outcome.success([f"No tokens found for '{query}'."], payload=payload)

    table = Table(title=f"Search results for '{query}'")
    table.add_column("#", justify="right")
    table.add_column("Symbol")
    table.add_column("Name")
    table.add_column("Address")
    table.add_column("Decimals", justify="right")
    for index, token in enumerate(results, start=1):
        table.add_row(str(index), token.symbol, token.name, token.address, str(token.decimals))
    return Outcome.success([f"Found {len(results)} token(s) for '{query}'."], payload=payload, table=table)


def handle_list_tokens(command: ListTokens, services: Services) -> Outcome:
    wallet = services.wallet_store.load()
    balances = fetch_token_balances(services.rpc, wallet.address, services.config.tokens)
    payload = {
        "address": wallet.address,
        "tokens": [
            {"mint": item.mint, "symbol": item.symbol, "balance": item.balance, "decimals": item.decimals}
            for item in balances
        ],
    }
    if not balances:
        return Outcome.success([f"No tokens found in wallet {wallet.address}."], payload=payload)

    table = Table(title="Wallet tokens")
    table.add_column("Symbol")
    table.add_column("Balance", justify="right")
    table.add_column("Mint")
    for item in balances:
        table.add_row(item.symbol, format_balance(item.balance), item.mint)
    return Outcome.success([f"{len(balances)} token(s) in wallet {wallet.address}."], payload=payload, table=table)


__all__ = ["register"]
