"""Exceptions raised while resolving secrets and managing Vault credentials.

Denial messages are stable: the orchestrator shows them verbatim to users, so
they identify the failing policy category without echoing the secret path,
name, or value.
"""

from __future__ import annotations

from enum import Enum


class DroneVaultError(Exception):
    """Base exception for all broker errors."""

    pass


class DenialReason(str, Enum):
    """Policy category that rejected a secret request."""

    EVENT = "access denied: event does not match"
    REPOSITORY = "access denied: repository does not match"
    BRANCH = "access denied: branch does not match"
    FORK = "access denied: forks are not allowed"


class SecretNotFoundError(DroneVaultError):
    """The record is absent from Vault or holds no data."""

    def __init__(self) -> None:
        super().__init__("secret not found")


class SecretKeyNotFoundError(DroneVaultError):
    """The requested key is absent from an existing record."""

    def __init__(self) -> None:
        super().__init__("secret key not found")


class AccessDeniedError(DroneVaultError):
    """A reserved policy key rejected the request.

    Args:
        reason: The policy category that failed.
    """

    def __init__(self, reason: DenialReason) -> None:
        self.reason = reason
        super().__init__(reason.value)


class UpstreamError(DroneVaultError):
    """Transport or protocol failure talking to Vault.

    Args:
        operation: Short name of the Vault call that failed.
        cause: Underlying exception, if any.
    """

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"vault {operation} failed{detail}")
        self.__cause__ = cause


class AuthError(DroneVaultError):
    """Credential acquisition or renewal failed for one cycle."""

    pass


class FatalAuthError(AuthError):
    """Credential failure that must stop the process."""

    pass


class RenewalUnsupportedError(AuthError):
    """The strategy has no incremental renewal; acquire instead."""

    pass


class AcquireUnsupportedError(AuthError):
    """The strategy cannot re-authenticate on its own."""

    pass
