"""Thin wrapper around ``hvac`` used as the shared storage client.

This is the only module that talks to Vault directly. It translates
``hvac`` and ``requests`` failures into :class:`UpstreamError` (reads) and
:class:`AuthError` (logins and renewals). Login responses are returned
rather than applied: the token is installed by the credential cell.
"""

from __future__ import annotations

import logging
from typing import Any

import hvac
import hvac.exceptions
import requests

from drone_vault.core.config.settings import PluginConfig
from drone_vault.core.exceptions import AuthError, UpstreamError

logger = logging.getLogger(__name__)

MOUNTS_ENDPOINT = "/v1/sys/internal/ui/mounts/"

_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    hvac.exceptions.VaultError,
    requests.exceptions.RequestException,
)


class VaultClient:
    """Vault API operations used by the resolver and the token renewers.

    The ``hvac`` client is created lazily on first use.

    Args:
        url: Vault server URL. Defaults to hvac's ``VAULT_ADDR`` handling.
        token: Initial token, if any.
        namespace: Vault Enterprise namespace.
        verify: TLS verification flag or path to a CA bundle.
        cert: Client certificate and key paths for mutual TLS.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        namespace: str | None = None,
        verify: bool | str = True,
        cert: tuple[str, str] | None = None,
        timeout: int = 30,
    ) -> None:
        self._url = url
        self._initial_token = token
        self._namespace = namespace
        self._verify = verify
        self._cert = cert
        self._timeout = timeout
        self._client: Any = None

    @classmethod
    def from_config(cls, config: PluginConfig) -> VaultClient:
        """Create a client from the plugin configuration."""
        verify: bool | str = not config.vault_skip_verify
        if config.vault_cacert and not config.vault_skip_verify:
            verify = config.vault_cacert
        cert = None
        if config.vault_client_cert and config.vault_client_key:
            cert = (config.vault_client_cert, config.vault_client_key)
        return cls(
            url=config.vault_addr,
            token=config.vault_token,
            namespace=config.vault_namespace,
            verify=verify,
            cert=cert,
            timeout=config.vault_timeout_seconds,
        )

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = hvac.Client(
                url=self._url,
                token=self._initial_token,
                namespace=self._namespace,
                verify=self._verify,
                cert=self._cert,
                timeout=self._timeout,
            )
        return self._client

    @property
    def token(self) -> str | None:
        """Return the token currently used for requests."""
        return self._get_client().token or None

    def set_token(self, value: str) -> None:
        """Use *value* for all subsequent requests."""
        self._get_client().token = value

    def read(self, path: str) -> dict[str, Any] | None:
        """Read the logical path *path*.

        Returns:
            The decoded response, or ``None`` if nothing exists at *path*.

        Raises:
            UpstreamError: On transport errors or when Vault rejects the read.
        """
        try:
            response = self._get_client().read(path)
        except hvac.exceptions.InvalidPath:
            return None
        except _TRANSPORT_ERRORS as exc:
            raise UpstreamError("read", exc) from exc
        return response if isinstance(response, dict) else None

    def mount_info(self, path: str) -> Any:
        """Describe the mount that *path* belongs to.

        Raises:
            UpstreamError: If the mount cannot be described.
        """
        try:
            return self._get_client().adapter.get(MOUNTS_ENDPOINT + path)
        except _TRANSPORT_ERRORS as exc:
            raise UpstreamError("mount lookup", exc) from exc

    def renew_self(self, increment: int) -> dict[str, Any]:
        """Renew the current token by *increment* seconds.

        Raises:
            AuthError: If the renewal is rejected or Vault is unreachable.
        """
        try:
            return self._get_client().auth.token.renew_self(increment=increment)
        except _TRANSPORT_ERRORS as exc:
            raise AuthError(f"token renewal failed: {exc}") from exc

    def login_kubernetes(self, role: str, jwt: str, mount_point: str) -> dict[str, Any]:
        """Exchange a service-account token for a Vault token.

        Raises:
            AuthError: If the login is rejected or Vault is unreachable.
        """
        try:
            return self._get_client().auth.kubernetes.login(
                role=role,
                jwt=jwt,
                use_token=False,
                mount_point=mount_point,
            )
        except _TRANSPORT_ERRORS as exc:
            raise AuthError(f"kubernetes login failed: {exc}") from exc

    def login_approle(self, role_id: str, secret_id: str, mount_point: str) -> dict[str, Any]:
        """Exchange an AppRole role id and secret id for a Vault token.

        Raises:
            AuthError: If the login is rejected or Vault is unreachable.
        """
        try:
            return self._get_client().auth.approle.login(
                role_id=role_id,
                secret_id=secret_id,
                use_token=False,
                mount_point=mount_point,
            )
        except _TRANSPORT_ERRORS as exc:
            raise AuthError(f"approle login failed: {exc}") from exc
