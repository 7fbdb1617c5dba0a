"""Keypair storage for Solanize."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import base58
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)
from mnemonic import Mnemonic
from solders.keypair import Keypair

from solanize.core.errors import (
    ValidationError,
    WalletCorruptError,
    WalletNotFoundError,
    WalletWriteError,
)

if TYPE_CHECKING:  # pragma: no cover
    from solanize.core.config import SolanizeConfig

logger = logging.getLogger(__name__)

KEYPAIR_LENGTH = 64
SEED_LENGTH = 32
MNEMONIC_STRENGTH = 256
MNEMONIC_WORD_COUNTS = {12, 15, 18, 21, 24}


@dataclass(frozen=True)
class Wallet:
    """A loaded keypair plus, right after generation, its recovery phrase."""

    keypair: Keypair
    path: Path
    mnemonic: str | None = None

    @property
    def address(self) -> str:
        return str(self.keypair.pubkey())

    @property
    def masked_address(self) -> str:
        address = self.address
        return f"{address[:4]}…{address[-4:]}"


class WalletStore:
    """Owns the keypair file at the configured path."""

    def __init__(self, keypair_path: Path | str) -> None:
        self.keypair_path = Path(keypair_path).expanduser()
        self._mnemonic = Mnemonic("english")

    @classmethod
    def from_config(cls, config: SolanizeConfig) -> WalletStore:
        return cls(config.wallet.resolved_path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def exists(self) -> bool:
        return self.keypair_path.exists()

    def generate(self) -> Wallet:
        """Create a new keypair from a fresh recovery phrase, replacing any existing file."""
        logger.info("Generating new wallet at %s", self.keypair_path)
        mnemonic = self._mnemonic.generate(strength=MNEMONIC_STRENGTH)
        private_key = ed25519.Ed25519PrivateKey.from_private_bytes(self._seed_from_mnemonic(mnemonic))
        secret = self._serialize_private_key(private_key)
        self._write_secret(secret)
        return Wallet(keypair=Keypair.from_bytes(secret), path=self.keypair_path, mnemonic=mnemonic)

    def restore(self, secret: str) -> Wallet:
        """Replace the keypair with one recovered from a phrase, JSON array, or base58 secret."""
        candidate = secret.strip()
        if not candidate:
            raise ValidationError("Secret cannot be empty.")
        if self._looks_like_mnemonic(candidate):
            phrase = " ".join(candidate.lower().split())
            if not self._mnemonic.check(phrase):
                raise ValidationError("Invalid recovery phrase checksum.")
            private_key = ed25519.Ed25519PrivateKey.from_private_bytes(self._seed_from_mnemonic(phrase))
        else:
            secret_bytes = self._parse_secret_input(candidate)
            if len(secret_bytes) not in {SEED_LENGTH, KEYPAIR_LENGTH}:
                raise ValidationError("Secret key must be 32 or 64 bytes.")
            private_key = ed25519.Ed25519PrivateKey.from_private_bytes(secret_bytes[:SEED_LENGTH])
            if len(secret_bytes) == KEYPAIR_LENGTH and secret_bytes[SEED_LENGTH:] != _public_bytes(private_key):
                raise ValidationError("Provided public key does not match private key.")
        normalized = self._serialize_private_key(private_key)
        self._write_secret(normalized)
        logger.info("Wallet restored at %s", self.keypair_path)
        return Wallet(keypair=Keypair.from_bytes(normalized), path=self.keypair_path)

    def load(self) -> Wallet:
        if not self.exists():
            raise WalletNotFoundError(self.keypair_path)
        try:
            raw = json.loads(self.keypair_path.read_text())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise WalletCorruptError(f"Invalid wallet format at {self.keypair_path}: {exc}") from exc
        if (
            not isinstance(raw, list)
            or len(raw) != KEYPAIR_LENGTH
            or not all(isinstance(item, int) and 0 <= item <= 255 for item in raw)
        ):
            raise WalletCorruptError(
                f"Invalid wallet format at {self.keypair_path}: expected a JSON array of {KEYPAIR_LENGTH} bytes"
            )
        secret = bytes(raw)
        private_key = ed25519.Ed25519PrivateKey.from_private_bytes(secret[:SEED_LENGTH])
        if secret[SEED_LENGTH:] != _public_bytes(private_key):
            raise WalletCorruptError(f"Invalid wallet format at {self.keypair_path}: public key mismatch")
        return Wallet(keypair=Keypair.from_bytes(secret), path=self.keypair_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _write_secret(self, secret: bytes) -> None:
        try:
            self.keypair_path.parent.mkdir(parents=True, exist_ok=True)
            self.keypair_path.write_text(json.dumps(list(secret)))
        except OSError as exc:
            raise WalletWriteError(f"Failed to write wallet to {self.keypair_path}: {exc}") from exc
        try:
            os.chmod(self.keypair_path, 0o600)
        except PermissionError:
            # Ignore on platforms without chmod support (e.g., Windows)
            pass

    def _seed_from_mnemonic(self, mnemonic: str) -> bytes:
        return self._mnemonic.to_seed(mnemonic, passphrase="")[:SEED_LENGTH]

    def _looks_like_mnemonic(self, candidate: str) -> bool:
        words = candidate.lower().split()
        if len(words) not in MNEMONIC_WORD_COUNTS:
            return False
        return all(word in self._mnemonic.wordlist for word in words)

    @staticmethod
    def _parse_secret_input(value: str) -> bytes:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            if all(isinstance(item, int) and 0 <= item <= 255 for item in parsed):
                return bytes(parsed)
            raise ValidationError("Secret key array must contain byte values.")
        try:
            return base58.b58decode(value)
        except ValueError as exc:
            raise ValidationError("Unable to parse secret key input.") from exc

    @staticmethod
    def _serialize_private_key(private_key: ed25519.Ed25519PrivateKey) -> bytes:
        private_bytes = private_key.private_bytes(
            encoding=Encoding.Raw,
            format=PrivateFormat.Raw,
            encryption_algorithm=NoEncryption(),
        )
        return private_bytes + _public_bytes(private_key)


def _public_bytes(private_key: ed25519.Ed25519PrivateKey) -> bytes:
    return private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)


__all__ = ["Wallet", "WalletStore"]
