import json
import os
from pathlib import Path

import base58
import pytest
from mnemonic import Mnemonic

from solanize.core.errors import ValidationError, WalletCorruptError, WalletNotFoundError
from solanize.solana.wallet import WalletStore


def test_generate_persists_keypair_with_permissions(tmp_path: Path) -> None:
    store = WalletStore(tmp_path / "keys" / "wallet.json")

    wallet = store.generate()

    assert store.exists()
    assert wallet.mnemonic is not None
    assert len(wallet.mnemonic.split()) == 24
    raw = json.loads(store.keypair_path.read_text())
    assert isinstance(raw, list) and len(raw) == 64
    assert wallet.mnemonic not in store.keypair_path.read_text()
    assert os.stat(store.keypair_path).st_mode & 0o777 in {0o600, 0o666}  # windows may ignore chmod


def test_generate_then_load_gives_same_address(tmp_path: Path) -> None:
    store = WalletStore(tmp_path / "wallet.json")

    generated = store.generate()
    loaded = store.load()

    assert loaded.address == generated.address
    assert loaded.mnemonic is None
    assert str(loaded.keypair.pubkey()) == loaded.address


def test_generate_overwrites_existing_wallet(tmp_path: Path) -> None:
    store = WalletStore(tmp_path / "wallet.json")
    first = store.generate()
    second = store.generate()

    assert first.address != second.address
    assert store.load().address == second.address


def test_load_missing_wallet(tmp_path: Path) -> None:
    store = WalletStore(tmp_path / "missing.json")
    with pytest.raises(WalletNotFoundError) as excinfo:
        store.load()
    assert "missing.json" in str(excinfo.value)


@pytest.mark.parametrize(
    "contents",
    ["not json", json.dumps({"secret": 1}), json.dumps([1, 2, 3]), json.dumps([300] * 64)],
)
def test_load_rejects_malformed_files(tmp_path: Path, contents: str) -> None:
    path = tmp_path / "wallet.json"
    path.write_text(contents)
    with pytest.raises(WalletCorruptError):
        WalletStore(path).load()


def test_load_rejects_mismatched_public_key(tmp_path: Path) -> None:
    store = WalletStore(tmp_path / "wallet.json")
    store.generate()
    raw = json.loads(store.keypair_path.read_text())
    raw[-1] = (raw[-1] + 1) % 256
    store.keypair_path.write_text(json.dumps(raw))

    with pytest.raises(WalletCorruptError):
        store.load()


def test_restore_from_mnemonic_recovers_address(tmp_path: Path) -> None:
    original = WalletStore(tmp_path / "a.json").generate()

    restored = WalletStore(tmp_path / "b.json").restore(f"  {original.mnemonic.upper()}  ")

    assert restored.address == original.address


def test_restore_from_secret_formats(tmp_path: Path) -> None:
    source = WalletStore(tmp_path / "source.json")
    original = source.generate()
    secret = bytes(json.loads(source.keypair_path.read_text()))
    target = WalletStore(tmp_path / "target.json")

    assert target.restore(json.dumps(list(secret))).address == original.address
    assert target.restore(base58.b58encode(secret).decode()).address == original.address
    assert target.restore(base58.b58encode(secret[:32]).decode()).address == original.address
    assert target.load().address == original.address


def test_restore_rejects_bad_checksum(tmp_path: Path) -> None:
    phrase = WalletStore(tmp_path / "a.json").generate().mnemonic
    words = phrase.split()
    helper = Mnemonic("english")
    for candidate in helper.wordlist:
        tampered = " ".join([*words[:-1], candidate])
        if not helper.check(tampered):
            break

    with pytest.raises(ValidationError):
        WalletStore(tmp_path / "b.json").restore(tampered)


@pytest.mark.parametrize("secret", ["", "   ", "[1, 2, 999]", "0OIl", "abc"])
def test_restore_rejects_invalid_secrets(tmp_path: Path, secret: str) -> None:
    store = WalletStore(tmp_path / "wallet.json")
    with pytest.raises(ValidationError):
        store.restore(secret)
    assert not store.exists()


def test_restore_rejects_mismatched_keypair_bytes(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        WalletStore(tmp_path / "wallet.json").restore(json.dumps(list(range(64))))


def test_masked_address(tmp_path: Path) -> None:
    wallet = WalletStore(tmp_path / "wallet.json").generate()
    assert wallet.masked_address == f"{wallet.address[:4]}…{wallet.address[-4:]}"
