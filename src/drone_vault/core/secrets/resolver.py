"""Secret resolution with record-embedded access control."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from drone_vault.core.audit.sinks import AuditSink, NullAuditSink
from drone_vault.core.audit.types import AuditAction, AuditEvent, AuditStatus
from drone_vault.core.exceptions import (
    AccessDeniedError,
    SecretKeyNotFoundError,
    SecretNotFoundError,
)
from drone_vault.core.secrets.base import (
    WHOLE_RECORD,
    ResolvedSecret,
    SecretRecord,
    SecretRequest,
    normalize_record,
)
from drone_vault.core.secrets.match import lookup
from drone_vault.core.secrets.paths import MountInfoSource, PathResolver
from drone_vault.core.secrets.policy import PolicyAttributes
from drone_vault.core.utils import safe_call

logger = logging.getLogger(__name__)


class SecretSource(MountInfoSource, Protocol):
    """Vault operations the resolver needs."""

    def read(self, path: str) -> Mapping[str, Any] | None:
        """Read the raw response at *path*; ``None`` when absent."""
        ...


def _unwrap(response: Mapping[str, Any] | None, is_v2: bool) -> Mapping[str, Any] | None:
    """Return the record data from a logical read response.

    KV v2 nests the record as ``data.data`` next to ``data.metadata``.
    Exactly one level is unwrapped: always on a v2 mount, and also when the
    response has the v2 shape but the mount could not be described (for
    example when the path was given with its ``data`` segment and the token
    may not introspect mounts).
    """
    if not response:
        return None
    data = response.get("data")
    if not isinstance(data, Mapping):
        return None
    nested = data.get("data")
    if is_v2:
        return nested if isinstance(nested, Mapping) else None
    if isinstance(nested, Mapping) and isinstance(data.get("metadata"), Mapping):
        return nested
    return data


class SecretResolver:
    """Look up secrets in Vault and enforce their embedded policy.

    Each call is independent: records are fetched fresh and never cached.

    Args:
        source: Vault client used for reads and mount introspection.
        disallow_forks: Global default for denying fork builds, used
            when a record does not set ``X-Drone-Disallow-Forks``.
        audit_sink: Receives one event per decision. Defaults to a sink
            that discards events.
        path_resolver: Path rewriting strategy. Defaults to a
            :class:`PathResolver` on *source*.
    """

    def __init__(
        self,
        source: SecretSource,
        disallow_forks: bool = False,
        audit_sink: AuditSink | None = None,
        path_resolver: PathResolver | None = None,
    ) -> None:
        self._source = source
        self._disallow_forks = disallow_forks
        self._audit = audit_sink or NullAuditSink()
        self._paths = path_resolver or PathResolver(source)

    @property
    def disallow_forks(self) -> bool:
        """Return the global fork default."""
        return self._disallow_forks

    def fetch(self, path: str) -> SecretRecord:
        """Read and normalise the record at *path*.

        Raises:
            SecretNotFoundError: If the record is absent or empty.
            UpstreamError: If Vault cannot be reached or rejects the read.
        """
        is_v2, effective = self._paths.resolve(path)
        data = _unwrap(self._source.read(effective), is_v2)
        if not data:
            raise SecretNotFoundError()
        return normalize_record(data)

    def find(self, request: SecretRequest) -> ResolvedSecret:
        """Resolve *request* into a secret value.

        Raises:
            SecretNotFoundError: If the record is absent or empty.
            SecretKeyNotFoundError: If the record lacks the requested key.
            AccessDeniedError: If the record's policy rejects the build.
            UpstreamError: If Vault cannot be reached.
        """
        key = request.key
        try:
            record = self.fetch(request.path)
        except SecretNotFoundError:
            self._emit(request, AuditStatus.FAILURE, "not_found")
            raise

        if key == WHOLE_RECORD:
            value: str | None = json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        else:
            value = lookup(record, key)
        if value is None:
            self._emit(request, AuditStatus.FAILURE, "key_not_found")
            raise SecretKeyNotFoundError()

        policy = PolicyAttributes.from_record(record)
        reason = policy.evaluate(request, self._disallow_forks)
        if reason is not None:
            logger.debug(
                "%s (event=%s repo=%s ref=%s target=%s fork=%s secret=%s "
                "allowed_events=%s allowed_repos=%s allowed_branches=%s disallow_forks=%s)",
                reason.value,
                request.build.event,
                request.repo.slug,
                request.build.ref,
                request.build.target,
                request.build.fork if request.is_fork else "",
                request.path,
                list(policy.events),
                list(policy.repos),
                list(policy.branches),
                policy.effective_disallow_forks(self._disallow_forks),
            )
            self._emit(request, AuditStatus.DENIED, reason.name.lower())
            raise AccessDeniedError(reason)

        logger.debug(
            "secret matched and returned (event=%s repo=%s secret=%s)",
            request.build.event,
            request.repo.slug,
            request.path,
        )
        self._emit(request, AuditStatus.SUCCESS, "granted")
        return ResolvedSecret(name=key, data=value)

    def _emit(self, request: SecretRequest, status: AuditStatus, outcome: str) -> None:
        event = AuditEvent(
            action=AuditAction.SECRET_ACCESSED if status is AuditStatus.SUCCESS else AuditAction.SECRET_DENIED,
            actor=request.repo.slug,
            resource=f"{request.path}:{request.key}",
            status=status,
            metadata={
                "outcome": outcome,
                "event": request.build.event,
                "ref": request.build.ref,
                "target": request.build.target,
                "fork": request.build.fork if request.is_fork else "",
            },
        )
        safe_call(
            lambda: self._audit.emit(event),
            logger,
            "Failed to emit audit event for secret %s",
            request.path,
        )
