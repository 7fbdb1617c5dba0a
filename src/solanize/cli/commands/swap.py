"""Token swap and price commands."""

from __future__ import annotations

import logging

from solanize.cli.types import CommandRouter, Outcome, Price, Services, Swap, require_positive_amount
from solanize.core.errors import ValidationError
from solanize.solana.transaction import sign_swap_transaction

logger = logging.getLogger(__name__)


def register(router: CommandRouter) -> None:
    """Register the swap and price commands."""
    router.register(Swap, handle_swap, "Swap tokens through Jupiter")
    router.register(Price, handle_price, "Look up a token's USD price")


def handle_swap(command: Swap, services: Services) -> Outcome:
    require_positive_amount(command.amount)
    jupiter = services.jupiter
    tokens = services.config.tokens
    input_mint = jupiter.resolve_mint(command.from_token, tokens)
    output_mint = jupiter.resolve_mint(command.to_token, tokens)
    if input_mint == output_mint:
        raise ValidationError("Cannot swap a token for itself.")

    wallet = services.wallet_store.load()
    amount_units = int(round(command.amount * 10 ** jupiter.token_decimals(input_mint)))
    logger.info("Swapping %s %s for %s", command.amount, command.from_token, command.to_token)
    quote = jupiter.get_quote(input_mint, output_mint, amount_units)
    expected = quote.out_amount_units / 10 ** jupiter.token_decimals(output_mint)

    swap = jupiter.get_swap_transaction(quote, wallet.address)
    raw = sign_swap_transaction(wallet.keypair, swap.swap_transaction)
    signature = services.rpc.send_transaction(raw)
    status = services.rpc.confirm(signature)

    from_symbol = jupiter.display_symbol(command.from_token, tokens)
    to_symbol = jupiter.display_symbol(command.to_token, tokens)
    route = " -> ".join(step.label for step in quote.route_plan)
    return Outcome.success(
        [
            f"Swap {status}: {command.amount} {from_symbol} for ~{expected:.6f} {to_symbol}",
            f"Price impact: {quote.price_impact:.4f}%",
            f"Route: {route} ({len(quote.route_plan)} steps)",
            f"Signature: {signature}",
        ],
        payload={
            "signature": signature,
            "status": status,
            "input_mint": input_mint,
            "output_mint": output_mint,
            "in_amount": amount_units,
            "expected_out": expected,
        },
    )


def handle_price(command: Price, services: Services) -> Outcome:
    if not command.token.strip():
        raise ValidationError("Token cannot be empty.")
    price = services.jupiter.get_price(command.token, services.config.tokens)
    messages = [f"{price.symbol} price: ${price.usd_price:.6f}", f"Mint: {price.mint}"]
    if price.price_change_24h is not None:
        messages.append(f"24h change: {price.price_change_24h:+.2f}%")
    return Outcome.success(
        messages,
        payload={"mint": price.mint, "symbol": price.symbol, "usd_price": price.usd_price},
    )


__all__ = ["register"]
