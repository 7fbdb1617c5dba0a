"""Error taxonomy shared by every Solanize collaborator."""

from __future__ import annotations


class AppError(RuntimeError):
    """Base class for failures that end a single command invocation."""

    exit_code: int = 1
    label: str = "Error"


class ConfigError(AppError):
    """Raised when the configuration document cannot be loaded or validated."""

    label = "Config error"


class WalletError(AppError):
    """Raised when wallet operations fail."""

    label = "Wallet error"


class WalletNotFoundError(WalletError):
    """Raised when no keypair exists at the configured path."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Wallet not found at path: {path}. Run `solanize generate-wallet` first.")
        self.path = path


class WalletCorruptError(WalletError):
    """Raised when the keypair file cannot be parsed as a keypair."""


class WalletWriteError(WalletError):
    """Raised when the keypair file cannot be written."""


class NetworkError(AppError):
    """Raised on transport-level failures talking to RPC or HTTP APIs."""

    label = "Network error"


class InsufficientFaucetError(AppError):
    """Raised when the faucet rejects an airdrop because of rate limiting."""

    label = "Faucet error"


class TransactionError(AppError):
    """Raised when the network rejects a transaction."""

    label = "Transaction failed"


class ConfirmationTimeoutError(AppError):
    """Raised when a signature does not reach the requested commitment in time."""

    label = "Timed out"


class QuoteError(AppError):
    """Raised when the aggregator cannot quote a route."""

    label = "Quote error"


class TokenNotFoundError(AppError):
    """Raised when a token symbol or mint cannot be resolved."""

    label = "Not found"


class ValidationError(AppError):
    """Raised for bad user input such as non-positive amounts or malformed addresses."""

    exit_code = 2
    label = "Invalid input"


__all__ = [
    "AppError",
    "ConfigError",
    "WalletError",
    "WalletNotFoundError",
    "WalletCorruptError",
    "WalletWriteError",
    "NetworkError",
    "InsufficientFaucetError",
    "TransactionError",
    "ConfirmationTimeoutError",
    "QuoteError",
    "TokenNotFoundError",
    "ValidationError",
]
