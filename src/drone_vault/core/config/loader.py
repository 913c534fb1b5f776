"""Configuration loader using dataconf.

This module provides functions for loading configuration from HOCON files,
strings, and the environment variables the plugin has always been deployed
with (``DRONE_*`` and ``VAULT_*``).
"""

import os
import re
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, cast

import dataconf

from drone_vault.core.config.settings import PluginConfig
from drone_vault.core.utils import parse_bool

T = TypeVar("T")

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> int:
    """Parse a duration into whole seconds.

    Accepts bare integers (seconds) and Go-style duration strings such as
    ``"90s"``, ``"1h30m"`` or ``"72h"``. Fractions of a second are dropped.

    Args:
        value: The duration string.

    Returns:
        The duration in whole seconds.

    Raises:
        ValueError: If *value* is not a valid, non-negative duration.

    Example:
        >>> parse_duration("1h30m")
        5400
    """
    text = value.strip()
    if text.isdigit():
        return int(text)
    if not text:
        return 0

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return int(total)


_ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "DRONE_SECRET": ("secret", str),
    "DRONE_BIND": ("bind", str),
    "DRONE_DEBUG": ("debug", parse_bool),
    "DRONE_LOG_LEVEL": ("log_level", str.upper),
    "DRONE_DISALLOW_FORKS": ("disallow_forks", parse_bool),
    "DRONE_AUDIT_LOG": ("audit_log", str),
    "VAULT_ADDR": ("vault_addr", str),
    "VAULT_TOKEN": ("vault_token", str),
    "VAULT_NAMESPACE": ("vault_namespace", str),
    "VAULT_CACERT": ("vault_cacert", str),
    "VAULT_CLIENT_CERT": ("vault_client_cert", str),
    "VAULT_CLIENT_KEY": ("vault_client_key", str),
    "VAULT_SKIP_VERIFY": ("vault_skip_verify", parse_bool),
    "VAULT_CLIENT_TIMEOUT": ("vault_timeout_seconds", parse_duration),
    "VAULT_TOKEN_RENEWAL": ("token_renewal_seconds", parse_duration),
    "VAULT_TOKEN_TTL": ("token_ttl_seconds", parse_duration),
    "VAULT_TOKEN_RENEWAL_STRICT": ("token_renewal_strict", parse_bool),
    "VAULT_AUTH_TYPE": ("auth_type", str.lower),
    "VAULT_AUTH_MOUNT_POINT": ("auth_mount_point", str),
    "VAULT_KUBERNETES_ROLE": ("kubernetes_role", str),
    "VAULT_KUBERNETES_TOKEN_PATH": ("kubernetes_token_path", str),
    "VAULT_APPROLE_ID": ("approle_id", str),
    "VAULT_APPROLE_SECRET": ("approle_secret", str),
}
"""Environment variable name -> (config field, converter)."""


def load_from_file(path: str, config_class: type[T]) -> T:
    """Load configuration from a HOCON file.

    Args:
        path: Path to the HOCON configuration file
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from the file

    Example:
        >>> config = load_from_file("drone-vault.conf", PluginConfig)
    """
    return cast(T, dataconf.file(path, config_class))


def load_from_string(hocon_str: str, config_class: type[T]) -> T:
    """Load configuration from a HOCON string.

    Args:
        hocon_str: HOCON configuration as a string
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from the string

    Example:
        >>> hocon = '''
        ... {
        ...   secret: "correct-horse-battery-staple"
        ...   auth_type: approle
        ... }
        ... '''
        >>> config = load_from_string(hocon, PluginConfig)
    """
    return cast(T, dataconf.string(hocon_str, config_class))


def env_to_dict(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect the plugin's environment variables into config field values.

    Unset and empty variables are skipped so the dataclass defaults apply.
    ``secret`` is always present so a missing ``DRONE_SECRET`` is reported
    by validation rather than as an unknown field.

    Raises:
        ValueError: If a variable cannot be converted.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {"secret": ""}
    for name, (field_name, convert) in _ENV_FIELDS.items():
        raw = env.get(name)
        if raw is None or raw == "":
            continue
        try:
            values[field_name] = convert(raw)
        except ValueError as exc:
            raise ValueError(f"{name}: {exc}") from exc
    return values


def load_from_env(
    config_class: type[T] = PluginConfig,  # type: ignore[assignment]
    environ: Mapping[str, str] | None = None,
) -> T:
    """Load configuration from environment variables.

    Args:
        config_class: The configuration dataclass type to load into
        environ: Mapping to read instead of ``os.environ`` (for tests)

    Returns:
        Instance of config_class populated from the environment

    Example:
        >>> # With DRONE_SECRET=... VAULT_AUTH_TYPE=kubernetes
        >>> config = load_from_env()
    """
    return cast(T, dataconf.dict(env_to_dict(environ), config_class))
