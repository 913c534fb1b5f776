"""Scheduled token renewal.

Every cycle follows the same contract regardless of strategy:

1. With a token installed, try ``renew`` for the configured TTL.
2. Fall back to ``acquire`` when renewal is unsupported, fails, or grants
   a lease strictly shorter than requested.
3. Install whatever token came out of the cycle.

Failures are logged and retried on the next tick. Only a failure at
startup, or a :class:`FatalAuthError`, stops the process.
"""

from __future__ import annotations

import logging
import threading

from drone_vault.core.audit.sinks import AuditSink, NullAuditSink
from drone_vault.core.audit.types import AuditAction, AuditEvent, AuditStatus
from drone_vault.core.config.base import AuthMethod
from drone_vault.core.config.settings import PluginConfig
from drone_vault.core.exceptions import (
    AcquireUnsupportedError,
    AuthError,
    FatalAuthError,
    RenewalUnsupportedError,
)
from drone_vault.core.token.approle import AppRoleRenewer
from drone_vault.core.token.base import Renewer, Token
from drone_vault.core.token.credential import CredentialCell
from drone_vault.core.token.kubernetes import KubernetesRenewer
from drone_vault.core.token.static import StaticRenewer
from drone_vault.core.utils import safe_call
from drone_vault.core.vault.client import VaultClient

logger = logging.getLogger(__name__)


class RenewalLoop:
    """Drive a :class:`Renewer` on a fixed interval.

    Args:
        renewer: The acquisition strategy.
        cell: Credential cell receiving every new token.
        ttl_seconds: Requested token TTL, sent as the renewal increment.
        interval_seconds: Time between cycles; ``0`` disables renewal.
        audit_sink: Receives acquisition and renewal outcomes.
    """

    name = "renewer"

    def __init__(
        self,
        renewer: Renewer,
        cell: CredentialCell,
        ttl_seconds: int,
        interval_seconds: int,
        audit_sink: AuditSink | None = None,
    ) -> None:
        self._renewer = renewer
        self._cell = cell
        self._ttl = ttl_seconds
        self._interval = interval_seconds
        self._audit = audit_sink or NullAuditSink()
        self._stopped = threading.Event()

    @property
    def enabled(self) -> bool:
        """Return True when periodic renewal is configured."""
        return self._interval > 0

    @property
    def interval_seconds(self) -> int:
        """Return the interval between cycles."""
        return self._interval

    def authenticate(self) -> Token:
        """Obtain the startup token.

        Strategies that cannot log in keep the token already in the cell.

        Raises:
            FatalAuthError: If no usable token can be obtained.
        """
        try:
            token = self._renewer.acquire()
        except AcquireUnsupportedError:
            token = self._cell.snapshot()
        except AuthError as exc:
            raise FatalAuthError(f"vault: initial authentication failed: {exc}") from exc

        if token is None or not token.value:
            raise FatalAuthError("vault: no token available at startup")
        self._cell.install(token)
        self._emit(AuditAction.TOKEN_ACQUIRED, AuditStatus.SUCCESS, token)
        logger.info("vault: authenticated using %s auth", self._renewer.name)
        return token

    def refresh(self) -> Token | None:
        """Run one renewal cycle.

        Returns:
            The installed token, or ``None`` when the cycle was skipped.

        Raises:
            AuthError: If the fallback login fails.
        """
        renewed: Token | None = None
        current = self._cell.snapshot()
        if current is not None and current.value:
            try:
                renewed = self._renewer.renew(self._ttl)
            except RenewalUnsupportedError:
                pass
            except FatalAuthError:
                raise
            except AuthError as exc:
                logger.warning("vault: token could not be renewed: %s", exc)

        if renewed is not None and not self._is_short(renewed):
            self._cell.install(renewed)
            self._emit(AuditAction.TOKEN_RENEWED, AuditStatus.SUCCESS, renewed)
            return renewed
        if renewed is not None:
            logger.info(
                "vault: token could not be renewed for desired ttl (granted %ss, requested %ss)",
                renewed.ttl_seconds,
                self._ttl,
            )

        try:
            acquired = self._renewer.acquire()
        except AcquireUnsupportedError:
            if renewed is not None:
                self._cell.install(renewed)
                self._emit(AuditAction.TOKEN_RENEWED, AuditStatus.WARNING, renewed)
                return renewed
            logger.warning("vault: token renewal skipped until next tick")
            self._emit(AuditAction.TOKEN_RENEWAL_FAILED, AuditStatus.WARNING, None)
            return None

        self._cell.install(acquired)
        self._emit(AuditAction.TOKEN_ACQUIRED, AuditStatus.SUCCESS, acquired)
        return acquired

    def run(self) -> None:
        """Refresh the token every interval until :meth:`stop` is called.

        Raises:
            FatalAuthError: If the strategy reports an unrecoverable failure.
        """
        if not self.enabled:
            logger.debug("vault: token refreshing disabled")
            self._stopped.wait()
            return

        logger.info("vault: token renewal enabled: %ss interval", self._interval)
        while not self._stopped.wait(self._interval):
            try:
                self.refresh()
            except FatalAuthError:
                self._emit(AuditAction.TOKEN_RENEWAL_FAILED, AuditStatus.FAILURE, None)
                raise
            except AuthError as exc:
                logger.error("vault: refreshing token failed: %s", exc)
                self._emit(AuditAction.TOKEN_RENEWAL_FAILED, AuditStatus.FAILURE, None)

    def stop(self) -> None:
        """Ask :meth:`run` to return; observed within one tick."""
        self._stopped.set()

    def _is_short(self, token: Token) -> bool:
        return token.ttl_seconds is not None and token.ttl_seconds < self._ttl

    def _emit(self, action: AuditAction, status: AuditStatus, token: Token | None) -> None:
        metadata = {"auth_method": self._renewer.name}
        if token is not None and token.ttl_seconds is not None:
            metadata["ttl_seconds"] = str(token.ttl_seconds)
        event = AuditEvent(
            action=action,
            actor=self.name,
            resource=f"auth/{self._renewer.name}",
            status=status,
            metadata=metadata,
        )
        safe_call(
            lambda: self._audit.emit(event),
            logger,
            "Failed to emit audit event for %s",
            action.value,
        )


def build_renewer(config: PluginConfig, client: VaultClient) -> Renewer:
    """Select the acquisition strategy named by ``config.auth_type``."""
    if config.auth_type == AuthMethod.KUBERNETES:
        return KubernetesRenewer(
            client,
            role=config.kubernetes_role or "",
            mount_point=config.mount_point,
            token_path=config.kubernetes_token_path,
        )
    if config.auth_type == AuthMethod.APPROLE:
        return AppRoleRenewer(
            client,
            role_id=config.approle_id or "",
            secret_id=config.approle_secret or "",
            mount_point=config.mount_point,
        )
    return StaticRenewer(client, strict=config.token_renewal_strict)


def build_renewal_loop(
    config: PluginConfig,
    client: VaultClient,
    cell: CredentialCell,
    audit_sink: AuditSink | None = None,
) -> RenewalLoop:
    """Wire the configured strategy to *cell*.

    For the token auth method the operator's token is installed right away,
    and renewal is disabled unless both an interval and a TTL are set.
    """
    renewer = build_renewer(config, client)
    interval = config.renewal_interval_seconds
    if config.auth_type == AuthMethod.TOKEN:
        initial = config.vault_token or client.token
        if initial:
            cell.install(Token(value=initial))
        if config.token_ttl_seconds == 0:
            interval = 0
    return RenewalLoop(
        renewer,
        cell,
        ttl_seconds=config.token_ttl_seconds,
        interval_seconds=interval,
        audit_sink=audit_sink,
    )
