"""Configuration models for drone-vault.

Settings are declared as dataclasses and loaded with dataconf, either from
HOCON or from the ``DRONE_*`` / ``VAULT_*`` environment variables.
"""

from drone_vault.core.config.base import AuthMethod, LogLevel
from drone_vault.core.config.loader import (
    env_to_dict,
    load_from_env,
    load_from_file,
    load_from_string,
    parse_duration,
)
from drone_vault.core.config.settings import PluginConfig

__all__ = [
    "AuthMethod",
    "LogLevel",
    "PluginConfig",
    "env_to_dict",
    "load_from_env",
    "load_from_file",
    "load_from_string",
    "parse_duration",
]
