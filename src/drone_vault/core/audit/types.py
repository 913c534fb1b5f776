"""Audit event types and models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditAction(str, Enum):
    """Standard audit actions."""

    SECRET_ACCESSED = "secret_accessed"
    SECRET_DENIED = "secret_denied"
    TOKEN_ACQUIRED = "token_acquired"
    TOKEN_RENEWED = "token_renewed"
    TOKEN_RENEWAL_FAILED = "token_renewal_failed"


class AuditStatus(str, Enum):
    """Audit event status."""

    SUCCESS = "success"
    FAILURE = "failure"
    DENIED = "denied"
    WARNING = "warning"


@dataclass
class AuditEvent:
    """A single audit event.

    Events describe who asked for what and the outcome. They never carry
    secret values or tokens.

    Args:
        action: The action that occurred (enum or custom string).
        actor: Who performed the action (e.g. repository slug, renewer name).
        resource: What was acted upon (e.g. secret path and key).
        status: Outcome of the action.
        timestamp: When the event occurred.
        metadata: Additional key-value data.
    """

    action: AuditAction | str
    actor: str
    resource: str
    status: AuditStatus
    timestamp: datetime = field(default_factory=_utcnow)
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "action": self.action.value
            if isinstance(self.action, AuditAction)
            else self.action,
            "actor": self.actor,
            "resource": self.resource,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }
