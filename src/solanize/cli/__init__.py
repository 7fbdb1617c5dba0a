"""CLI package for Solanize."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any

import typer
import typer.rich_utils
from rich.markup import escape

from solanize.core.config import CONFIG_ENV_VAR, NETWORK_PRESETS, SolanizeConfig, load, resolve_config_path, write_default_config
from solanize.core.errors import ConfigError
from solanize.core.logs import configure_logging

from .branding import render_outcome, themed_console
from .dispatcher import dispatch
from .types import (
    Balance,
    CreateTx,
    Faucet,
    GenerateWallet,
    History,
    ListTokens,
    Menu,
    Pending,
    Price,
    RestoreWallet,
    Search,
    SendTx,
    ShowConfig,
    Swap,
)

typer.rich_utils.USE_RICH = False

app = typer.Typer(invoke_without_command=True, help="Solanize: Solana wallet and Jupiter swap client", no_args_is_help=False)

CLI_CONSOLE = themed_console()


@dataclass
class CLIState:
    """Global options collected by the app callback."""

    config_path: Path | None = None
    verbose: bool = False
    overrides: dict[str, Any] = field(default_factory=dict)


def styled_echo(message: str = "", *, nl: bool = True) -> None:
    """Print using the Solanize themed console."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n")


def _build_overrides(rpc_url: str | None, network: str | None) -> dict[str, Any]:
    solana: dict[str, Any] = {}
    if network:
        solana["network"] = network
        if not rpc_url and network in NETWORK_PRESETS:
            solana["rpc_url"] = NETWORK_PRESETS[network]
    if rpc_url:
        solana["rpc_url"] = rpc_url
    return {"solana": solana} if solana else {}


def _load_config(state: CLIState) -> SolanizeConfig:
    try:
        config = load(resolve_config_path(state.config_path), overrides=state.overrides)
    except ConfigError as exc:
        styled_echo(f"[solanize.error.header]❌ {escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    log_file = Path(config.logging.file).expanduser() if config.logging.file else None
    configure_logging(config.logging.level, config.logging.format, log_file=log_file, verbose=state.verbose)
    return config


def _run(ctx: typer.Context, command: object) -> None:
    state: CLIState = ctx.ensure_object(CLIState)
    config = _load_config(state)
    outcome = dispatch(command, config)
    render_outcome(CLI_CONSOLE, outcome)
    if not outcome.ok:
        raise typer.Exit(code=outcome.exit_code)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", envvar=CONFIG_ENV_VAR, help="Path to config.toml"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),  # noqa: B008
    rpc_url: str | None = typer.Option(None, "--rpc-url", help="Override the configured RPC endpoint"),  # noqa: B008
    network: str | None = typer.Option(None, "--network", help="Override the configured network"),  # noqa: B008
) -> None:
    """Manage a Solana wallet, transfers, and Jupiter swaps."""
    ctx.obj = CLIState(config_path=config, verbose=verbose, overrides=_build_overrides(rpc_url, network))
    if ctx.invoked_subcommand is None:
        _run(ctx, Menu())


@app.command()
def menu(ctx: typer.Context) -> None:
    """Run the interactive menu."""
    _run(ctx, Menu())


@app.command("generate-wallet")
def generate_wallet(ctx: typer.Context) -> None:
    """Generate a new wallet, overwriting the existing keypair file."""
    _run(ctx, GenerateWallet())


@app.command("restore-wallet")
def restore_wallet(
    ctx: typer.Context,
    secret: str = typer.Option(..., "--secret", prompt=True, hide_input=True, help="Recovery phrase, JSON key array, or base58 secret"),  # noqa: B008
) -> None:
    """Restore a wallet from a recovery phrase or secret key."""
    _run(ctx, RestoreWallet(secret=secret))


@app.command()
def balance(ctx: typer.Context) -> None:
    """Check the wallet's SOL balance."""
    _run(ctx, Balance())


@app.command()
def faucet(
    ctx: typer.Context,
    amount: float | None = typer.Option(None, "--amount", help="SOL to request (defaults to faucet.airdrop_amount)"),  # noqa: B008
) -> None:
    """Request an airdrop on devnet or testnet."""
    _run(ctx, Faucet(amount=amount))


@app.command("create-tx")
def create_tx(
    ctx: typer.Context,
    to: str = typer.Option(..., "--to", help="Recipient address"),  # noqa: B008
    amount: float = typer.Option(..., "--amount", help="Amount in SOL"),  # noqa: B008
    send: bool = typer.Option(False, "--send", help="Broadcast and confirm immediately"),  # noqa: B008
) -> None:
    """Create a signed SOL transfer."""
    _run(ctx, CreateTx(to=to, amount=amount, send=send))


@app.command("send-tx")
def send_tx(
    ctx: typer.Context,
    signature: str = typer.Option(..., "--signature", help="Transaction data printed by create-tx"),  # noqa: B008
) -> None:
    """Broadcast a transaction created earlier."""
    _run(ctx, SendTx(signature_data=signature))


@app.command()
def swap(
    ctx: typer.Context,
    from_token: str = typer.Option(..., "--from", help="Token to sell (symbol or mint)"),  # noqa: B008
    to_token: str = typer.Option(..., "--to", help="Token to buy (symbol or mint)"),  # noqa: B008
    amount: float = typer.Option(..., "--amount", help="Amount of the token to sell"),  # noqa: B008
) -> None:
    """Swap tokens through Jupiter."""
    _run(ctx, Swap(from_token=from_token, to_token=to_token, amount=amount))


@app.command()
def price(
    ctx: typer.Context,
    token: str = typer.Option("SOL", "--token", help="Token symbol or mint"),  # noqa: B008
) -> None:
    """Look up a token's USD price."""
    _run(ctx, Price(token=token))


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Option(..., "--query", help="Symbol, name, or address fragment"),  # noqa: B008
) -> None:
    """Search the Jupiter token list."""
    _run(ctx, Search(query=query))


@app.command("list-tokens")
def list_tokens(ctx: typer.Context) -> None:
    """List tokens held by the wallet."""
    _run(ctx, ListTokens())


@app.command()
def history(
    ctx: typer.Context,
    limit: int = typer.Option(50, "--limit", help="Number of transactions to fetch"),  # noqa: B008
    before: str | None = typer.Option(None, "--before", help="Start before this signature"),  # noqa: B008
    pubkey: str | None = typer.Option(None, "--pubkey", help="Address to inspect (defaults to the wallet)"),  # noqa: B008
) -> None:
    """Show transaction history."""
    _run(ctx, History(limit=limit, before=before, address=pubkey))


@app.command()
def pending(
    ctx: typer.Context,
    pubkey: str | None = typer.Option(None, "--pubkey", help="Address to inspect (defaults to the wallet)"),  # noqa: B008
) -> None:
    """Show transactions that are still processing."""
    _run(ctx, Pending(address=pubkey))


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration."""
    _run(ctx, ShowConfig())


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    network: str = typer.Option("devnet", "--network", help="devnet, testnet, or mainnet-beta"),  # noqa: B008
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),  # noqa: B008
) -> None:
    """Write a starter config.toml."""
    state: CLIState = ctx.ensure_object(CLIState)
    try:
        target = write_default_config(resolve_config_path(state.config_path), network=network, force=force)
    except ConfigError as exc:
        styled_echo(f"[solanize.error.header]❌ {escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    styled_echo(f"Wrote {network} config to {target}")


@app.command()
def version() -> None:
    """Show CLI version."""
    try:
        pkg_version = metadata.version("solanize")
    except metadata.PackageNotFoundError:
        pkg_version = "0.0.0"
    styled_echo(f"Solanize CLI version {pkg_version}")


def main() -> None:
    """Console script entrypoint."""
    app()


__all__ = ["app", "main"]
