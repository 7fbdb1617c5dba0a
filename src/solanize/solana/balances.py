"""Wallet token balances."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from solanize.core.config import SOL_MINT
from solanize.core.errors import NetworkError
from solanize.solana.rpc import SolanaRPCClient, lamports_to_sol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenBalance:
    mint: str
    symbol: str
    balance: float
    decimals: int


def _parse_token_account(account: dict[str, Any]) -> tuple[str, float, int] | None:
    if not isinstance(account, dict):
        raise NetworkError("Malformed RPC response; token account is not an object")
    try:
        info = account["account"]["data"]["parsed"]["info"]
        amount = info["tokenAmount"]
        mint = info["mint"]
    except (KeyError, TypeError):
        return None
    if not isinstance(amount, dict) or not isinstance(mint, str):
        raise NetworkError("Malformed RPC response; token account has no tokenAmount object")
    ui_amount = amount.get("uiAmount") or 0.0
    decimals = amount.get("decimals") or 0
    if not isinstance(ui_amount, (int, float)) or not isinstance(decimals, int):
        raise NetworkError("Malformed RPC response; token amount fields have the wrong type")
    return mint, float(ui_amount), decimals


def fetch_token_balances(
    rpc: SolanaRPCClient,
    address: str,
    known_tokens: Mapping[str, str],
) -> list[TokenBalance]:
    """Return SOL plus every SPL token account with a positive balance.

    Symbols come from `known_tokens` (symbol -> mint); unknown mints are
    shown by their first eight characters.
    """
    symbols = {mint: symbol for symbol, mint in known_tokens.items()}
    balances: list[TokenBalance] = []
    sol = lamports_to_sol(rpc.get_balance(address))
    if sol > 0:
        balances.append(TokenBalance(mint=SOL_MINT, symbol="SOL", balance=sol, decimals=9))

    accounts = rpc.get_token_accounts_by_owner(address)
    logger.info("Found %d token accounts", len(accounts))
    for account in accounts:
        parsed = _parse_token_account(account)
        if parsed is None:
            logger.debug("Skipping unparsed token account: %r", account.get("pubkey"))
            continue
        mint, ui_amount, decimals = parsed
        if ui_amount <= 0:
            continue
        balances.append(
            TokenBalance(mint=mint, symbol=symbols.get(mint, mint[:8]), balance=ui_amount, decimals=decimals)
        )
    return balances


def format_balance(balance: float) -> str:
    if balance >= 1_000_000:
        return f"{balance / 1_000_000:.2f}M"
    if balance >= 1_000:
        return f"{balance / 1_000:.2f}K"
    if balance >= 1:
        return f"{balance:.6f}"
    return f"{balance:.9f}"


__all__ = ["TokenBalance", "fetch_token_balances", "format_balance"]
