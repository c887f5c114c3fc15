"""Topic auditors: build events and publish them to a sink."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..realm import normalize_realm
from .events import (
    ACTIVITY_TOPIC,
    AUTHENTICATION_TOPIC,
    TOPICS,
    ActivityAuditEventBuilder,
    AuditEvent,
    AuthenticationAuditEventBuilder,
)
from .sink import AuditSink

logger = logging.getLogger(__name__)


class AuditError(Exception):
    """Publishing an audit event failed."""
    pass


@dataclass(frozen=True)
class AuditConfig:
    """Which topics are audited, and for which realms."""
    enabled: bool = True
    topics: FrozenSet[str] = field(default_factory=lambda: frozenset(TOPICS))
    excluded_realms: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "excluded_realms", frozenset(normalize_realm(realm) for realm in self.excluded_realms))


class Auditor:
    """Base auditor bound to one topic."""

    topic: str = ""

    def __init__(self, sink: AuditSink, config: Optional[AuditConfig] = None):
        self.sink = sink
        self.config = config or AuditConfig()

    def is_auditing(self, realm: Optional[str], topic: str) -> bool:
        if not self.config.enabled or topic != self.topic or topic not in self.config.topics:
            return False
        return normalize_realm(realm) not in self.config.excluded_realms

    def publish(self, event: AuditEvent) -> None:
        """Send the event to the sink unless its topic/realm is not audited.

        Raises:
            AuditError: The sink failed to accept the event
        """
        if not self.is_auditing(event.value.get("realm"), event.topic):
            logger.debug("Audit topic %s disabled, dropping event", event.topic)
            return
        try:
            self.sink.publish(event)
        except Exception as exc:
            raise AuditError(f"Unable to publish {event.topic} audit event: {exc}") from exc


class AuthenticationAuditor(Auditor):
    topic = AUTHENTICATION_TOPIC

    def authentication_event(self) -> AuthenticationAuditEventBuilder:
        return AuthenticationAuditEventBuilder()


class ActivityAuditor(Auditor):
    topic = ACTIVITY_TOPIC

    def activity_event(self) -> ActivityAuditEventBuilder:
        return ActivityAuditEventBuilder()
