"""Configuration loading for Solanize."""

from __future__ import annotations

import logging
import os
import tomllib
from copy import deepcopy
from pathlib import Path
from typing import Annotated, Any, Literal

import pydantic
import tomli_w
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, StringConstraints

from solanize.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "SOLANIZE_CONFIG"
DEFAULT_COMMITMENT = "confirmed"
DEFAULT_TOKEN_LIST_URL = "https://token.jup.ag/all"

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

NETWORK_PRESETS: dict[str, str] = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}

Commitment = Literal["processed", "confirmed", "finalized"]
LogFormat = Literal["pretty", "compact", "json"]
NonEmptyStr = Annotated[str, StringConstraints(min_length=1, pattern=r"\S")]


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SolanaSettings(_Section):
    network: NonEmptyStr
    rpc_url: NonEmptyStr
    commitment: Commitment = DEFAULT_COMMITMENT


class WalletSettings(_Section):
    keypair_path: NonEmptyStr

    @property
    def resolved_path(self) -> Path:
        return Path(self.keypair_path).expanduser()


class FaucetSettings(_Section):
    airdrop_amount: float


class JupiterSettings(_Section):
    api_url: NonEmptyStr
    price_api_url: NonEmptyStr
    slippage_bps: NonNegativeInt
    token_list_url: NonEmptyStr = DEFAULT_TOKEN_LIST_URL


class LoggingSettings(_Section):
    level: str = "info"
    format: LogFormat = "pretty"
    file: str | None = None


class SolanizeConfig(_Section):
    """Immutable settings loaded once per run."""

    solana: SolanaSettings
    wallet: WalletSettings
    faucet: FaucetSettings
    jupiter: JupiterSettings
    tokens: dict[str, NonEmptyStr]
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Pick the config path from the argument, the environment, or the working directory."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / CONFIG_FILENAME


def load(path: Path | str, *, overrides: dict[str, Any] | None = None) -> SolanizeConfig:
    """Read the TOML document at `path` into a validated configuration."""
    config_path = Path(path).expanduser()
    logger.info("Loading config from: %s", config_path)
    data = _read_config_dict(config_path)
    if overrides:
        data = _merge_dicts(data, overrides)
    try:
        config = SolanizeConfig(**data)
    except pydantic.ValidationError as exc:
        raise ConfigError(f"Invalid config {config_path}: {_describe_errors(exc)}") from exc
    logger.info("Config loaded successfully")
    return config


def write_default_config(path: Path | str, *, network: str = "devnet", force: bool = False) -> Path:
    """Write a starter configuration for `network` to `path`."""
    target = Path(path).expanduser()
    if target.exists() and not force:
        raise ConfigError(f"Config already exists at {target}. Pass --force to overwrite.")
    rpc_url = NETWORK_PRESETS.get(network)
    if rpc_url is None:
        allowed = ", ".join(sorted(NETWORK_PRESETS))
        raise ConfigError(f"Unknown network '{network}'. Choose from: {allowed}.")
    document = {
        "solana": {"network": network, "rpc_url": rpc_url, "commitment": DEFAULT_COMMITMENT},
        "wallet": {"keypair_path": "~/.config/solana/solanize.json"},
        "faucet": {"airdrop_amount": 1.0},
        "jupiter": {
            "api_url": "https://lite-api.jup.ag/swap/v1",
            "price_api_url": "https://lite-api.jup.ag/price/v3",
            "slippage_bps": 50,
            "token_list_url": DEFAULT_TOKEN_LIST_URL,
        },
        "tokens": {"SOL": SOL_MINT, "USDC": USDC_MINT},
        "logging": {"level": "info", "format": "pretty"},
    }
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(tomli_w.dumps(document))
    except OSError as exc:
        raise ConfigError(f"Failed to write config to {target}: {exc}") from exc
    logger.info("Wrote default %s config to %s", network, target)
    return target


def config_summary(config: SolanizeConfig) -> list[tuple[str, str]]:
    return [
        ("Network", config.solana.network),
        ("RPC URL", config.solana.rpc_url),
        ("Commitment", config.solana.commitment),
        ("Wallet Path", config.wallet.keypair_path),
        ("Airdrop Amount", f"{config.faucet.airdrop_amount} SOL"),
        ("Jupiter API", config.jupiter.api_url),
        ("Price API", config.jupiter.price_api_url),
        ("Slippage", f"{config.jupiter.slippage_bps}bps"),
        ("Tokens", ", ".join(sorted(config.tokens)) or "-"),
        ("Log Level", config.logging.level),
        ("Log Format", config.logging.format),
    ]


def _read_config_dict(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        return tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to load config from {path}: {exc}") from exc


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _describe_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_ENV_VAR",
    "NETWORK_PRESETS",
    "SOL_MINT",
    "USDC_MINT",
    "SolanizeConfig",
    "SolanaSettings",
    "WalletSettings",
    "FaucetSettings",
    "JupiterSettings",
    "LoggingSettings",
    "config_summary",
    "load",
    "resolve_config_path",
    "write_default_config",
]
