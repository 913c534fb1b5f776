"""Vault API access."""

from drone_vault.core.vault.client import VaultClient

__all__ = ["VaultClient"]
