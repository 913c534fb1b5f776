"""Vault token acquisition strategies and the renewal loop."""

from drone_vault.core.token.approle import AppRoleRenewer
from drone_vault.core.token.base import RenewalState, Renewer, Token, token_from_response
from drone_vault.core.token.credential import CredentialCell
from drone_vault.core.token.kubernetes import KubernetesRenewer
from drone_vault.core.token.renewal import RenewalLoop, build_renewal_loop, build_renewer
from drone_vault.core.token.static import StaticRenewer

__all__ = [
    "AppRoleRenewer",
    "CredentialCell",
    "KubernetesRenewer",
    "RenewalLoop",
    "RenewalState",
    "Renewer",
    "StaticRenewer",
    "Token",
    "build_renewal_loop",
    "build_renewer",
    "token_from_response",
]
