"""Synchronised holder for the live Vault token."""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from drone_vault.core.token.base import RenewalState, Token

logger = logging.getLogger(__name__)


class TokenConsumer(Protocol):
    """A client that sends the installed token with its requests."""

    def set_token(self, value: str) -> None: ...


class CredentialCell:
    """Thread-safe cell owning the current token.

    The renewal loop is the only writer. :meth:`install` swaps the snapshot
    and pushes the token into the storage client under one lock, so readers
    see either the old token or the new one, never a mix.

    Args:
        consumer: Client that must use the installed token, if any.
    """

    def __init__(self, consumer: TokenConsumer | None = None) -> None:
        self._consumer = consumer
        self._lock = threading.Lock()
        self._token: Token | None = None

    def install(self, token: Token) -> None:
        """Replace the current token with *token*."""
        with self._lock:
            self._token = token
            if self._consumer is not None:
                self._consumer.set_token(token.value)
        logger.debug("vault: token installed (ttl=%s)", token.ttl_seconds)

    def snapshot(self) -> Token | None:
        """Return the current token, or ``None`` before authentication."""
        with self._lock:
            return self._token

    @property
    def state(self) -> RenewalState:
        """Return the renewal state."""
        token = self.snapshot()
        if token is None or not token.value:
            return RenewalState.UNAUTHENTICATED
        return RenewalState.AUTHENTICATED
