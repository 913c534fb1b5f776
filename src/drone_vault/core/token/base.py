"""Vault token model and the renewer contract."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from drone_vault.core.exceptions import AuthError


class RenewalState(enum.Enum):
    """Whether a usable token has been installed."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Token:
    """A Vault token and its remaining lease.

    The token value is masked in ``__repr__``.

    Args:
        value: The client token.
        ttl_seconds: Lease granted by Vault in seconds; ``None`` when
            unknown (an operator-supplied token that was never renewed).
    """

    value: str
    ttl_seconds: int | None = None

    def __repr__(self) -> str:
        return f"Token(value=***, ttl_seconds={self.ttl_seconds!r})"


class Renewer(Protocol):
    """Contract shared by the token acquisition strategies.

    ``renew`` extends the current token; ``acquire`` performs a full login.
    A strategy lacking one of them raises :class:`RenewalUnsupportedError`
    or :class:`AcquireUnsupportedError` respectively.
    """

    name: str

    def acquire(self) -> Token:
        """Log in and return a fresh token."""
        ...

    def renew(self, increment: int) -> Token:
        """Extend the current token by *increment* seconds."""
        ...


def token_from_response(response: Any, source: str) -> Token:
    """Extract the token and lease from a login or renewal response.

    Raises:
        AuthError: If the response lacks a token or a lease duration.
    """
    auth = response.get("auth") if isinstance(response, Mapping) else None
    if not isinstance(auth, Mapping):
        raise AuthError(f"{source}: expected auth object from response")
    value = auth.get("client_token")
    if not isinstance(value, str) or not value:
        raise AuthError(f"{source}: expected a client token")
    lease = auth.get("lease_duration")
    if not isinstance(lease, int) or isinstance(lease, bool):
        raise AuthError(f"{source}: expected a lease duration")
    return Token(value=value, ttl_seconds=lease)
