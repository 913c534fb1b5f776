"""AppRole login with self-renewal."""

from __future__ import annotations

import logging

from drone_vault.core.token.base import Token, token_from_response
from drone_vault.core.vault.client import VaultClient

logger = logging.getLogger(__name__)

NAME = "approle"


class AppRoleRenewer:
    """Renew the current token, logging in with the AppRole when needed.

    Args:
        client: Vault client used for renewal and login.
        role_id: AppRole role id.
        secret_id: AppRole secret id.
        mount_point: Mount point of the approle auth method.
    """

    name = NAME

    def __init__(
        self,
        client: VaultClient,
        role_id: str,
        secret_id: str,
        mount_point: str = NAME,
    ) -> None:
        self._client = client
        self._role_id = role_id
        self._secret_id = secret_id
        self._mount_point = mount_point

    def acquire(self) -> Token:
        logger.debug("vault approle: generating new token")
        response = self._client.login_approle(self._role_id, self._secret_id, self._mount_point)
        token = token_from_response(response, "approle login")
        logger.debug("approle: token received (ttl=%ss)", token.ttl_seconds)
        return token

    def renew(self, increment: int) -> Token:
        logger.debug("vault approle: renewing token")
        response = self._client.renew_self(increment)
        token = token_from_response(response, "approle renewal")
        logger.debug("approle: token renewed (ttl=%ss)", token.ttl_seconds)
        return token
