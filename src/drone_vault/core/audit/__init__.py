"""Audit event types, sinks, and configuration filters."""

from drone_vault.core.audit.filters import ConfigFilter
from drone_vault.core.audit.sinks import (
    AuditSink,
    CompositeAuditSink,
    FileAuditSink,
    LoggingAuditSink,
    NullAuditSink,
)
from drone_vault.core.audit.types import (
    AuditAction,
    AuditEvent,
    AuditStatus,
)

__all__ = [
    "AuditAction",
    "AuditEvent",
    "AuditSink",
    "AuditStatus",
    "CompositeAuditSink",
    "ConfigFilter",
    "FileAuditSink",
    "LoggingAuditSink",
    "NullAuditSink",
]
