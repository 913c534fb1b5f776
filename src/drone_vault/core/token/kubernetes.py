"""Kubernetes service-account login."""

from __future__ import annotations

import logging
from pathlib import Path

from drone_vault.core.config.settings import DEFAULT_KUBERNETES_TOKEN_PATH
from drone_vault.core.exceptions import AuthError, RenewalUnsupportedError
from drone_vault.core.token.base import Token, token_from_response
from drone_vault.core.vault.client import VaultClient

logger = logging.getLogger(__name__)

NAME = "kubernetes"


class KubernetesRenewer:
    """Obtain Vault tokens by exchanging the pod's service-account token.

    Tokens are never renewed in place; every cycle logs in again with the
    service-account token read fresh from disk, since kubelet rotates it.

    Args:
        client: Vault client used for the login call.
        role: Vault role bound to the service account.
        mount_point: Mount point of the kubernetes auth method.
        token_path: Path of the mounted service-account token.
    """

    name = NAME

    def __init__(
        self,
        client: VaultClient,
        role: str,
        mount_point: str = NAME,
        token_path: str | Path = DEFAULT_KUBERNETES_TOKEN_PATH,
    ) -> None:
        self._client = client
        self._role = role
        self._mount_point = mount_point
        self._token_path = Path(token_path)

    def _read_jwt(self) -> str:
        logger.debug("kubernetes: reading account token from %s", self._token_path)
        try:
            jwt = self._token_path.read_text().strip()
        except OSError as exc:
            logger.error("kubernetes: cannot read account token at %s", self._token_path)
            raise AuthError(f"kubernetes: cannot read account token: {exc}") from exc
        if not jwt:
            raise AuthError(f"kubernetes: account token at {self._token_path} is empty")
        return jwt

    def acquire(self) -> Token:
        jwt = self._read_jwt()
        logger.debug("kubernetes: requesting vault token (mount=%s role=%s)", self._mount_point, self._role)
        response = self._client.login_kubernetes(self._role, jwt, self._mount_point)
        token = token_from_response(response, "kubernetes login")
        logger.debug("kubernetes: token received (ttl=%ss)", token.ttl_seconds)
        return token

    def renew(self, increment: int) -> Token:
        raise RenewalUnsupportedError("kubernetes: tokens are re-acquired, not renewed")
