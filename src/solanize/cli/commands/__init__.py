"""Builtin command registration."""

from __future__ import annotations

from solanize.cli.commands import history, settings, swap, tokens, transfer, wallet
from solanize.cli.types import CommandRouter


def register_builtin_commands(router: CommandRouter) -> None:
    """Attach all builtin command handlers to the router."""

    wallet.register(router)
    transfer.register(router)
    swap.register(router)
    tokens.register(router)
    history.register(router)
    settings.register(router)


__all__ = ["register_builtin_commands"]
