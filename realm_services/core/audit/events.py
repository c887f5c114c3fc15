"""Audit event model and fluent builders."""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

AUTHENTICATION_TOPIC = "authentication"
ACTIVITY_TOPIC = "activity"
TOPICS = (AUTHENTICATION_TOPIC, ACTIVITY_TOPIC)


class Component:
    AUTHENTICATION = "Authentication"


@dataclass
class AuditEvent:
    topic: str
    value: Dict[str, Any] = field(default_factory=dict)


class AuditEventBuilder:
    """Fluent builder shared by authentication and activity events.

    ``to_event()`` checks that the mandatory fields (transaction id, user
    id, timestamp) are present.
    """

    topic: str = ""

    def __init__(self):
        self._value: Dict[str, Any] = {}

    def event_name(self, name: str) -> "AuditEventBuilder":
        self._value["eventName"] = name
        return self

    def transaction_id(self, transaction_id: str) -> "AuditEventBuilder":
        self._value["transactionId"] = transaction_id
        return self

    def authentication(self, user_id: str) -> "AuditEventBuilder":
        self._value["userId"] = user_id
        return self

    def timestamp(self, epoch_millis: Optional[int]) -> "AuditEventBuilder":
        self._value["timestamp"] = int(epoch_millis if epoch_millis is not None else time.time() * 1000)
        return self

    def component(self, component: str) -> "AuditEventBuilder":
        self._value["component"] = component
        return self

    def realm(self, realm: str) -> "AuditEventBuilder":
        self._value["realm"] = realm
        return self

    def contexts(self, contexts: Dict[str, str]) -> "AuditEventBuilder":
        self._value["contexts"] = dict(contexts)
        return self

    def to_event(self) -> AuditEvent:
        for required in ("transactionId", "userId", "timestamp"):
            if required not in self._value:
                raise ValueError(f"The {required} field is required")
        return AuditEvent(self.topic, dict(self._value))


class AuthenticationAuditEventBuilder(AuditEventBuilder):
    topic = AUTHENTICATION_TOPIC

    def entries(self, entries: List[Any]) -> "AuthenticationAuditEventBuilder":
        self._value["entries"] = list(entries)
        return self


class ActivityAuditEventBuilder(AuditEventBuilder):
    topic = ACTIVITY_TOPIC
