"""Secret resolution: request model, glob matching, policy and path rewriting."""

from drone_vault.core.secrets.base import (
    Build,
    Repo,
    ResolvedSecret,
    SecretRecord,
    SecretRequest,
    normalize_record,
)
from drone_vault.core.secrets.match import lookup, matches, split_patterns
from drone_vault.core.secrets.paths import PathResolver, rewrite_path
from drone_vault.core.secrets.policy import PolicyAttributes
from drone_vault.core.secrets.resolver import SecretResolver

__all__ = [
    "Build",
    "PathResolver",
    "PolicyAttributes",
    "Repo",
    "ResolvedSecret",
    "SecretRecord",
    "SecretRequest",
    "SecretResolver",
    "lookup",
    "matches",
    "normalize_record",
    "rewrite_path",
    "split_patterns",
]
