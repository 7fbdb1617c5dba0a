"""Wallet management commands."""

from __future__ import annotations

from solanize.cli.types import Balance, CommandRouter, Faucet, GenerateWallet, Outcome, RestoreWallet, Services, require_positive_amount
from solanize.core.errors import ValidationError
from solanize.solana.balances import format_balance
from solanize.solana.rpc import lamports_to_sol, sol_to_lamports

FAUCET_NETWORKS = frozenset({"devnet", "testnet", "localnet"})


def register(router: CommandRouter) -> None:
    """Register the wallet commands."""
    router.register(GenerateWallet, handle_generate, "Generate a new wallet (overwrites the existing one)")
    router.register(RestoreWallet, handle_restore, "Restore a wallet from a recovery phrase or secret key")
    router.register(Balance, handle_balance, "Check the wallet's SOL balance")
    router.register(Faucet, handle_faucet, "Request a devnet/testnet airdrop")


def handle_generate(command: GenerateWallet, services: Services) -> Outcome:
    wallet = services.wallet_store.generate()
    return Outcome.success(
        [
            f"Wallet generated: {wallet.address}",
            f"Saved to {wallet.path}",
            f"Recovery phrase: {wallet.mnemonic}",
            "Write the recovery phrase down now; it will not be shown again.",
        ],
        payload={"address": wallet.address, "path": str(wallet.path), "mnemonic": wallet.mnemonic},
    )


def handle_restore(command: RestoreWallet, services: Services) -> Outcome:
    wallet = services.wallet_store.restore(command.secret)
    return Outcome.success(
        [f"Wallet restored: {wallet.address}", f"Saved to {wallet.path}"],
        payload={"address": wallet.address, "path": str(wallet.path)},
    )


def handle_balance(command: Balance, services: Services) -> Outcome:
    wallet = services.wallet_store.load()
    lamports = services.rpc.get_balance(wallet.address)
    balance = lamports_to_sol(lamports)
    return Outcome.success(
        [f"Address: {wallet.address}", f"Balance: {format_balance(balance)} SOL"],
        payload={"address": wallet.address, "lamports": lamports, "balance": balance},
    )


def handle_faucet(command: Faucet, services: Services) -> Outcome:
    config = services.config
    amount = config.faucet.airdrop_amount if command.amount is None else command.amount
    require_positive_amount(amount)
    network = config.solana.network
    if network not in FAUCET_NETWORKS:
        allowed = ", ".join(sorted(FAUCET_NETWORKS))
        raise ValidationError(f"Airdrops are only available on {allowed}; current network is '{network}'.")

    wallet = services.wallet_store.load()
    signature = services.rpc.request_airdrop(wallet.address, sol_to_lamports(amount))
    status = services.rpc.confirm(signature)
    balance = lamports_to_sol(services.rpc.get_balance(wallet.address))
    return Outcome.success(
        [
            f"Airdrop of {amount} SOL {status}.",
            f"Signature: {signature}",
            f"New balance: {format_balance(balance)} SOL",
        ],
        payload={"amount": amount, "signature": signature, "status": status, "balance": balance},
    )


__all__ = ["FAUCET_NETWORKS", "register"]
