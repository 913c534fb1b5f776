"""Vault secret extension for Drone: policy-aware secret lookup and token renewal."""

__version__ = "1.0.0"
