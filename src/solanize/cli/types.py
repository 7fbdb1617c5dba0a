"""Shared CLI types and routing helpers."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from rich.table import Table

from solanize.core.config import SolanizeConfig
from solanize.core.errors import AppError, ValidationError
from solanize.core.jupiter import JupiterClient
from solanize.core.logs import LogBuffer
from solanize.solana.rpc import SolanaRPCClient
from solanize.solana.wallet import WalletStore

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Represents the result of handling one command."""

    messages: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)
    error: AppError | None = None
    table: Table | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else self.error.exit_code

    @classmethod
    def success(cls, messages: Iterable[str], **kwargs: Any) -> Outcome:
        return cls(messages=list(messages), **kwargs)

    @classmethod
    def failure(cls, error: AppError) -> Outcome:
        return cls(messages=[str(error)], error=error)


def require_positive_amount(amount: float) -> None:
    """Reject zero, negative, NaN and infinite amounts."""
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be a positive number.")


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class GenerateWallet:
    category: ClassVar[str] = "wallet"


@dataclass(frozen=True)
class RestoreWallet:
    secret: str
    category: ClassVar[str] = "wallet"

    def __repr__(self) -> str:
        return "RestoreWallet(secret=***)"


@dataclass(frozen=True)
class Balance:
    category: ClassVar[str] = "wallet"


@dataclass(frozen=True)
class Faucet:
    amount: float | None = None
    category: ClassVar[str] = "wallet"


@dataclass(frozen=True)
class CreateTx:
    to: str
    amount: float
    send: bool = False
    category: ClassVar[str] = "transfer"


@dataclass(frozen=True)
class SendTx:
    signature_data: str
    category: ClassVar[str] = "transfer"


@dataclass(frozen=True)
class Swap:
    from_token: str
    to_token: str
    amount: float
    category: ClassVar[str] = "swap"


@dataclass(frozen=True)
class Price:
    token: str
    category: ClassVar[str] = "token"


@dataclass(frozen=True)
class Search:
    query: str
    category: ClassVar[str] = "token"


@dataclass(frozen=True)
class ListTokens:
    category: ClassVar[str] = "token"


@dataclass(frozen=True)
class History:
    limit: int = 50
    before: str | None = None
    address: str | None = None
    category: ClassVar[str] = "transfer"


@dataclass(frozen=True)
class Pending:
    address: str | None = None
    category: ClassVar[str] = "transfer"


@dataclass(frozen=True)
class ShowConfig:
    category: ClassVar[str] = "system"


@dataclass(frozen=True)
class ShowLogs:
    limit: int = 20
    category_filter: str | None = None
    category: ClassVar[str] = "system"


@dataclass(frozen=True)
class Menu:
    category: ClassVar[str] = "system"


# ----------------------------------------------------------------------
# Collaborators
# ----------------------------------------------------------------------
@dataclass
class Services:
    """Collaborators a command handler may use, all built from one config."""

    config: SolanizeConfig
    wallet_store: WalletStore
    rpc: SolanaRPCClient
    jupiter: JupiterClient
    log_buffer: LogBuffer = field(default_factory=LogBuffer)

    @classmethod
    def from_config(cls, config: SolanizeConfig, *, log_buffer: LogBuffer | None = None) -> Services:
        return cls(
            config=config,
            wallet_store=WalletStore.from_config(config),
            rpc=SolanaRPCClient(config.solana.rpc_url, commitment=config.solana.commitment),
            jupiter=JupiterClient.from_config(config),
            log_buffer=log_buffer or LogBuffer(),
        )


Handler = Callable[[Any, Services], Outcome]


class CommandHandler:
    """Container for command handler metadata."""

    def __init__(self, command_type: type, handler: Handler, help_text: str) -> None:
        self.command_type = command_type
        self.handler = handler
        self.help_text = help_text


class CommandRouter:
    """Maps each command type to exactly one handler."""

    def __init__(self) -> None:
        self._handlers: dict[type, CommandHandler] = {}

    def register(self, command_type: type, handler: Handler, help_text: str = "") -> None:
        logger.debug("Registering command: %s", command_type.__name__)
        self._handlers[command_type] = CommandHandler(command_type, handler, help_text)

    def available_commands(self) -> Iterable[CommandHandler]:
        return self._handlers.values()

    def dispatch(self, command: object, services: Services) -> Outcome:
        name = type(command).__name__
        entry = self._handlers.get(type(command))
        if entry is None:
            logger.info("Unknown command: %s", name)
            outcome = Outcome.failure(ValidationError(f"Unsupported command '{name}'."))
        else:
            logger.debug("Dispatching command %r", command)
            try:
                outcome = entry.handler(command, services)
            except AppError as exc:
                outcome = Outcome.failure(exc)
        self._record(name, getattr(command, "category", "system"), outcome, services.log_buffer)
        return outcome

    @staticmethod
    def _record(name: str, category: str, outcome: Outcome, log_buffer: LogBuffer) -> None:
        if outcome.ok:
            summary = outcome.messages[0] if outcome.messages else "done"
            logger.info("%s succeeded", name)
            log_buffer.record(category, f"{name}: {summary}")
            return
        logger.warning("%s failed: %s", name, outcome.error)
        severity = "warning" if isinstance(outcome.error, ValidationError) else "error"
        log_buffer.record(category, f"{name} failed: {outcome.error}", severity=severity)


__all__ = [
    "Balance",
    "CommandHandler",
    "CommandRouter",
    "CreateTx",
    "Faucet",
    "GenerateWallet",
    "History",
    "ListTokens",
    "Menu",
    "Outcome",
    "Pending",
    "Price",
    "RestoreWallet",
    "Search",
    "SendTx",
    "Services",
    "ShowConfig",
    "ShowLogs",
    "Swap",
    "require_positive_amount",
]
