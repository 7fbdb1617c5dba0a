"""Interactive numbered menu driving the command router."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape

from solanize.cli.branding import render_banner, render_outcome, themed_console
from solanize.cli.commands import register_builtin_commands
from solanize.cli.types import (
    Balance,
    CommandRouter,
    CreateTx,
    Faucet,
    GenerateWallet,
    History,
    ListTokens,
    Menu,
    Outcome,
    Pending,
    Price,
    RestoreWallet,
    Search,
    SendTx,
    Services,
    ShowConfig,
    ShowLogs,
    Swap,
)
from solanize.core.config import SolanizeConfig

logger = logging.getLogger(__name__)

QUIT_WORDS = frozenset({"q", "quit", "exit"})
YES_WORDS = frozenset({"y", "yes"})

PromptFn = Callable[[str], str]


class _Cancelled(Exception):
    """Raised when the user declines a confirmation."""


@dataclass(frozen=True)
class MenuItem:
    label: str
    build: Callable[[InteractiveMenu], object] | None


class InteractiveMenu:
    """Loop of: show actions, read a selection, collect arguments, dispatch, render."""

    def __init__(
        self,
        config: SolanizeConfig,
        services: Services,
        console: Console,
        prompt_fn: PromptFn,
        *,
        router: CommandRouter | None = None,
    ) -> None:
        self.config = config
        self.services = services
        self.console = console
        self._prompt_fn = prompt_fn
        if router is None:
            router = CommandRouter()
            register_builtin_commands(router)
        self._router = router
        self.items: list[MenuItem] = [
            MenuItem("Generate new wallet", InteractiveMenu._build_generate),
            MenuItem("Restore wallet", InteractiveMenu._build_restore),
            MenuItem("Check balance", lambda menu: Balance()),
            MenuItem("Request airdrop", InteractiveMenu._build_faucet),
            MenuItem("Create transaction", InteractiveMenu._build_create_tx),
            MenuItem("Send transaction", InteractiveMenu._build_send_tx),
            MenuItem("Swap tokens", InteractiveMenu._build_swap),
            MenuItem("Get token price", InteractiveMenu._build_price),
            MenuItem("Search tokens", InteractiveMenu._build_search),
            MenuItem("List wallet tokens", lambda menu: ListTokens()),
            MenuItem("Transaction history", InteractiveMenu._build_history),
            MenuItem("Pending transactions", lambda menu: Pending()),
            MenuItem("Show config", lambda menu: ShowConfig()),
            MenuItem("Recent activity", lambda menu: ShowLogs()),
            MenuItem("Exit", None),
        ]

    def run(self) -> None:
        render_banner(self.console, network=self.config.solana.network)
        while True:
            self._render_items()
            try:
                choice = self._prompt_fn("Select an option: ").strip().lower()
            except KeyboardInterrupt:
                self.console.print("[solanize.text.dim]Cancelled.[/]")
                continue
            except EOFError:
                break
            if choice in QUIT_WORDS:
                break
            item = self._resolve(choice)
            if item is None:
                self.console.print(f"[solanize.warning.text]Invalid selection '{escape(choice)}'. Enter 1-{len(self.items)}.[/]")
                continue
            if item.build is None:
                break
            try:
                command = item.build(self)
            except (KeyboardInterrupt, _Cancelled):
                self.console.print("[solanize.text.dim]Cancelled.[/]")
                continue
            except EOFError:
                break
            try:
                self.dispatch(command)
            except KeyboardInterrupt:
                self.console.print("[solanize.text.dim]Cancelled.[/]")
        self.console.print("Goodbye!")

    def dispatch(self, command: object) -> Outcome:
        outcome = self._router.dispatch(command, self.services)
        render_outcome(self.console, outcome)
        return outcome

    # ------------------------------------------------------------------
    # Prompt helpers
    # ------------------------------------------------------------------
    def _render_items(self) -> None:
        self.console.print()
        for index, item in enumerate(self.items, start=1):
            self.console.print(f"[solanize.menu.index]{index:>2}.[/] [solanize.menu.label]{item.label}[/]")

    def _resolve(self, choice: str) -> MenuItem | None:
        try:
            index = int(choice)
        except ValueError:
            return None
        if 1 <= index <= len(self.items):
            return self.items[index - 1]
        return None

    def _ask(self, message: str, default: str | None = None) -> str:
        suffix = f" [{default}]" if default is not None else ""
        answer = self._prompt_fn(f"{message}{suffix}: ").strip()
        if not answer and default is not None:
            return default
        return answer

    def _ask_number(self, message: str, default: float | None = None, *, cast: type = float) -> float:
        while True:
            raw = self._ask(message, None if default is None else str(default))
            try:
                return cast(raw)
            except ValueError:
                self.console.print(f"[solanize.warning.text]'{escape(raw)}' is not a valid number. Try again.[/]")

    def _confirm(self, message: str) -> bool:
        return self._prompt_fn(f"{message} (y/N): ").strip().lower() in YES_WORDS

    def _require_confirmation(self, message: str) -> None:
        if not self._confirm(message):
            raise _Cancelled

    # ------------------------------------------------------------------
    # Command builders
    # ------------------------------------------------------------------
    def _build_generate(self) -> GenerateWallet:
        if self.services.wallet_store.exists():
            self._require_confirmation("This will overwrite the existing wallet. Continue?")
        return GenerateWallet()

    def _build_restore(self) -> RestoreWallet:
        secret = self._ask("Recovery phrase, JSON key array, or base58 secret")
        if self.services.wallet_store.exists():
            self._require_confirmation("This will overwrite the existing wallet. Continue?")
        return RestoreWallet(secret=secret)

    def _build_faucet(self) -> Faucet:
        return Faucet(amount=self._ask_number("Amount (SOL)", self.config.faucet.airdrop_amount))

    def _build_create_tx(self) -> CreateTx:
        to = self._ask("Recipient address")
        amount = self._ask_number("Amount (SOL)")
        send = self._confirm("Broadcast immediately?")
        return CreateTx(to=to, amount=amount, send=send)

    def _build_send_tx(self) -> SendTx:
        data = self._ask("Transaction data")
        self._require_confirmation("Confirm sending transaction?")
        return SendTx(signature_data=data)

    def _build_swap(self) -> Swap:
        from_token = self._ask("From token (symbol or address)", "SOL")
        to_token = self._ask("To token (symbol or address)", "USDC")
        amount = self._ask_number("Amount")
        tokens = self.config.tokens
        display = self.services.jupiter.display_symbol
        self._require_confirmation(f"Swap {amount} {display(from_token, tokens)} for {display(to_token, tokens)}?")
        return Swap(from_token=from_token, to_token=to_token, amount=amount)

    def _build_price(self) -> Price:
        return Price(token=self._ask("Token symbol or address", "SOL"))

    def _build_search(self) -> Search:
        return Search(query=self._ask("Search tokens (symbol, name, or address)"))

    def _build_history(self) -> History:
        return History(limit=int(self._ask_number("Number of transactions to fetch", 20, cast=int)))


def handle_menu(command: Menu, services: Services) -> Outcome:
    session: PromptSession[str] = PromptSession()
    menu = InteractiveMenu(services.config, services, themed_console(), session.prompt)
    menu.run()
    return Outcome.success([])


def register(router: CommandRouter) -> None:
    """Register the Menu command."""
    router.register(Menu, handle_menu, "Run the interactive menu")


__all__ = ["InteractiveMenu", "MenuItem", "handle_menu", "register"]
