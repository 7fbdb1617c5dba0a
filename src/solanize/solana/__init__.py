"""Solana-focused utilities for Solanize."""

from .rpc import LAMPORTS_PER_SOL, SolanaRPCClient, lamports_to_sol, sol_to_lamports
from .wallet import Wallet, WalletStore

__all__ = ["LAMPORTS_PER_SOL", "SolanaRPCClient", "Wallet", "WalletStore", "lamports_to_sol", "sol_to_lamports"]
