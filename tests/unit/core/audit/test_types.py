"""Tests for audit event types."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from drone_vault.core.audit.types import (
    AuditAction,
    AuditEvent,
    AuditStatus,
)


class TestAuditAction:
    def test_values(self) -> None:
        assert AuditAction.SECRET_ACCESSED == "secret_accessed"
        assert AuditAction.SECRET_DENIED == "secret_denied"
        assert AuditAction.TOKEN_RENEWAL_FAILED == "token_renewal_failed"

    def test_is_str(self) -> None:
        assert isinstance(AuditAction.TOKEN_ACQUIRED, str)


class TestAuditStatus:
    def test_values(self) -> None:
        assert AuditStatus.SUCCESS == "success"
        assert AuditStatus.DENIED == "denied"
        assert AuditStatus.WARNING == "warning"


class TestAuditEvent:
    def test_basic_construction(self) -> None:
        event = AuditEvent(
            action=AuditAction.SECRET_ACCESSED,
            actor="octocat/hello-world",
            resource="secret/docker:username",
            status=AuditStatus.SUCCESS,
        )
        assert event.metadata == {}
        assert isinstance(event.timestamp, datetime)
        assert event.timestamp.tzinfo is not None

    def test_to_dict(self) -> None:
        event = AuditEvent(
            action=AuditAction.SECRET_DENIED,
            actor="octocat/hello-world",
            resource="secret/docker:username",
            status=AuditStatus.DENIED,
            timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
            metadata={"outcome": "branch"},
        )
        assert event.to_dict() == {
            "action": "secret_denied",
            "actor": "octocat/hello-world",
            "resource": "secret/docker:username",
            "status": "denied",
            "timestamp": "2026-01-01T00:00:00+00:00",
            "metadata": {"outcome": "branch"},
        }

    def test_custom_action_string(self) -> None:
        event = AuditEvent(action="custom", actor="a", resource="r", status=AuditStatus.WARNING)
        data = event.to_dict()
        assert data["action"] == "custom"
        json.dumps(data)
