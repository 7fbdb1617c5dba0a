from __future__ import annotations

from pathlib import Path

import pytest

from solanize.core.config import SolanizeConfig, load

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

CONFIG_TEMPLATE = """\
[solana]
network = "{network}"
rpc_url = "https://rpc.example.com"
{commitment_line}

[wallet]
keypair_path = "{keypair_path}"

[faucet]
airdrop_amount = 1.0

[jupiter]
api_url = "https://quote.example.com/v1"
price_api_url = "https://price.example.com/v3"
slippage_bps = 50
token_list_url = "https://tokens.example.com/all"

[tokens]
SOL = "{sol}"
USDC = "{usdc}"
"""


def render_config(
    keypair_path: Path,
    *,
    network: str = "devnet",
    commitment: str | None = "confirmed",
) -> str:
    commitment_line = f'commitment = "{commitment}"' if commitment else ""
    return CONFIG_TEMPLATE.format(
        network=network,
        commitment_line=commitment_line,
        keypair_path=keypair_path.as_posix(),
        sol=SOL_MINT,
        usdc=USDC_MINT,
    )


@pytest.fixture
def keypair_path(tmp_path: Path) -> Path:
    return tmp_path / "keys" / "wallet.json"


@pytest.fixture
def config_path(tmp_path: Path, keypair_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(render_config(keypair_path))
    return path


@pytest.fixture
def config(config_path: Path) -> SolanizeConfig:
    return load(config_path)


@pytest.fixture
def make_config(tmp_path: Path, keypair_path: Path):
    """Write a config with the given network/commitment and return its path."""

    def _make(*, network: str = "devnet", commitment: str | None = "confirmed", name: str = "custom.toml") -> Path:
        path = tmp_path / name
        path.write_text(render_config(keypair_path, network=network, commitment=commitment))
        return path

    return _make
