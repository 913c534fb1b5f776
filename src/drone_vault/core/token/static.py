"""Renewal of an operator-supplied token."""

from __future__ import annotations

import logging

from drone_vault.core.exceptions import AcquireUnsupportedError, AuthError, FatalAuthError
from drone_vault.core.token.base import Token, token_from_response
from drone_vault.core.vault.client import VaultClient

logger = logging.getLogger(__name__)

NAME = "token"


class StaticRenewer:
    """Keep a long-lived token alive through self-renewal.

    There is no way to log in again: when renewal fails the token is left
    as it is until the next cycle, on the assumption the operator supplied a
    token that outlives the outage. With ``strict`` enabled a failed renewal
    is fatal instead.

    Args:
        client: Vault client holding the token.
        strict: Treat renewal failure as fatal.
    """

    name = NAME

    def __init__(self, client: VaultClient, strict: bool = False) -> None:
        self._client = client
        self._strict = strict

    def acquire(self) -> Token:
        raise AcquireUnsupportedError("vault: a static token cannot be re-acquired")

    def renew(self, increment: int) -> Token:
        logger.debug("vault: refreshing token: increment %ds", increment)
        try:
            response = self._client.renew_self(increment)
            token = token_from_response(response, "token renewal")
        except AuthError as exc:
            if self._strict:
                raise FatalAuthError(f"vault: refreshing token failed: {exc}") from exc
            raise
        logger.debug("vault: refreshing token succeeded")
        return token
