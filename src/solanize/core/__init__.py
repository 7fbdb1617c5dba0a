"""Core services for Solanize."""

from .config import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    NETWORK_PRESETS,
    SolanizeConfig,
    config_summary,
    load,
    resolve_config_path,
    write_default_config,
)
from .errors import (
    AppError,
    ConfigError,
    ConfirmationTimeoutError,
    InsufficientFaucetError,
    NetworkError,
    QuoteError,
    TokenNotFoundError,
    TransactionError,
    ValidationError,
    WalletCorruptError,
    WalletError,
    WalletNotFoundError,
    WalletWriteError,
)
from .logs import LogBuffer, LogEntry, configure_logging

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "NETWORK_PRESETS",
    "SolanizeConfig",
    "config_summary",
    "load",
    "resolve_config_path",
    "write_default_config",
    "AppError",
    "ConfigError",
    "ConfirmationTimeoutError",
    "InsufficientFaucetError",
    "NetworkError",
    "QuoteError",
    "TokenNotFoundError",
    "TransactionError",
    "ValidationError",
    "WalletCorruptError",
    "WalletError",
    "WalletNotFoundError",
    "WalletWriteError",
    "LogBuffer",
    "LogEntry",
    "configure_logging",
]
