"""Audit events for authentication and activity topics.

- events.py: event model and builders
- auditors.py: per-topic auditors with realm/topic filtering
- sink.py: signed JSONL trail and in-memory sink
- legacy.py: legacy authentication log point translator
"""
from .events import (
    ACTIVITY_TOPIC,
    AUTHENTICATION_TOPIC,
    ActivityAuditEventBuilder,
    AuditEvent,
    AuthenticationAuditEventBuilder,
    Component,
)
from .auditors import ActivityAuditor, AuditConfig, AuditError, AuthenticationAuditor
from .sink import JsonlAuditSink, MemoryAuditSink
from .legacy import LegacyAuthenticationEventAuditor

__all__ = [
    "ACTIVITY_TOPIC",
    "AUTHENTICATION_TOPIC",
    "ActivityAuditEventBuilder",
    "AuditEvent",
    "AuthenticationAuditEventBuilder",
    "Component",
    "ActivityAuditor",
    "AuditConfig",
    "AuditError",
    "AuthenticationAuditor",
    "JsonlAuditSink",
    "MemoryAuditSink",
    "LegacyAuthenticationEventAuditor",
]
