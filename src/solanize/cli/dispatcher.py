"""Entry point that routes a command value to its handler."""

from __future__ import annotations

from solanize.cli import menu
from solanize.cli.commands import register_builtin_commands
from solanize.cli.types import CommandRouter, Outcome, Services
from solanize.core.config import SolanizeConfig


def build_router() -> CommandRouter:
    """Return a router with every builtin command plus the interactive menu."""
    router = CommandRouter()
    register_builtin_commands(router)
    menu.register(router)
    return router


_ROUTER = build_router()


def dispatch(command: object, config: SolanizeConfig, services: Services | None = None) -> Outcome:
    """Run `command` against `config`; every failure comes back as a failed Outcome."""
    if services is None:
        services = Services.from_config(config)
    return _ROUTER.dispatch(command, services)


__all__ = ["build_router", "dispatch"]
