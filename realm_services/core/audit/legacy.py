"""Legacy authentication logging translated into audit events.

Old-style authentication log points call ``audit()`` with a legacy event
name. Exactly one name (``CHANGE_USER_PASSWORD_SUCCEEDED``) is an activity
event; every other name is published as an authentication event.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from .auditors import ActivityAuditor, AuditError, AuthenticationAuditor
from .events import ACTIVITY_TOPIC, AUTHENTICATION_TOPIC, Component

ACTIVITY_EVENT_NAMES = frozenset({"CHANGE_USER_PASSWORD_SUCCEEDED"})

LOGOUT_EVENT_NAMES = frozenset({
    "LOGOUT",
    "LOGOUT_USER",
    "LOGOUT_ROLE",
    "LOGOUT_SERVICE",
    "LOGOUT_LEVEL",
    "LOGOUT_MODULE_INSTANCE",
})


class LegacyAuthenticationEventAuditor:
    """Routes legacy authentication events to the authentication or activity auditor."""

    def __init__(self, authentication_auditor: AuthenticationAuditor, activity_auditor: ActivityAuditor):
        self.authentication_auditor = authentication_auditor
        self.activity_auditor = activity_auditor

    def audit(
        self,
        event_name: Optional[str],
        event_description: Optional[str],
        transaction_id: str,
        authentication: str,
        realm_name: Optional[str],
        time: Optional[int],
        contexts: Optional[Dict[str, str]],
        entries: Optional[List[Any]],
    ) -> bool:
        """Audit an event raised by a legacy log point.

        A True result means no error occurred, not that the event was
        written: topics that are not audited are dropped silently.

        Args:
            event_name: Legacy message name, used for classification
            event_description: Becomes the audit event name
            transaction_id: Transaction id (required)
            authentication: Authenticated user id (required)
            realm_name: Realm of the event
            time: Event time in epoch milliseconds
            contexts: Extra context ids
            entries: Extra information (authentication events only)

        Returns:
            False if publishing failed, True otherwise

        Raises:
            ValueError: transaction_id or authentication is None
        """
        if transaction_id is None:
            raise ValueError("The transactionId field cannot be null")
        if authentication is None:
            raise ValueError("The authentication field cannot be null")

        if event_name and event_name in ACTIVITY_EVENT_NAMES:
            return self._audit_activity_event(
                event_description, transaction_id, authentication, realm_name, time, contexts
            )
        return self._audit_authentication_event(
            event_description, transaction_id, authentication, realm_name, time, contexts, entries
        )

    def _audit_authentication_event(self, description, transaction_id, authentication,
                                    realm_name, time, contexts, entries) -> bool:
        builder = self.authentication_auditor.authentication_event()
        builder.transaction_id(transaction_id) \
            .authentication(authentication) \
            .timestamp(time) \
            .component(Component.AUTHENTICATION)

        if description:
            builder.event_name(description)
        if realm_name:
            builder.realm(realm_name)
        if contexts:
            builder.contexts(contexts)
        if entries:
            builder.entries(entries)

        try:
            self.authentication_auditor.publish(builder.to_event())
        except AuditError:
            return False
        return True

    def _audit_activity_event(self, description, transaction_id, authentication,
                              realm_name, time, contexts) -> bool:
        builder = self.activity_auditor.activity_event()
        builder.transaction_id(transaction_id) \
            .authentication(authentication) \
            .timestamp(time) \
            .component(Component.AUTHENTICATION)

        if description:
            builder.event_name(description)
        if realm_name:
            builder.realm(realm_name)
        if contexts:
            builder.contexts(contexts)

        try:
            self.activity_auditor.publish(builder.to_event())
        except AuditError:
            return False
        return True

    def is_logout_event(self, message: Optional[str]) -> bool:
        """True when the legacy message name denotes a logout."""
        return bool(message) and message in LOGOUT_EVENT_NAMES

    def is_auditing(self, realm: Optional[str], topic: Optional[str] = None) -> bool:
        """Whether this auditor audits ``topic`` (or any of its topics) for the realm."""
        if topic is None:
            return (self.authentication_auditor.is_auditing(realm, AUTHENTICATION_TOPIC)
                    or self.activity_auditor.is_auditing(realm, ACTIVITY_TOPIC))
        if topic == AUTHENTICATION_TOPIC:
            return self.authentication_auditor.is_auditing(realm, topic)
        if topic == ACTIVITY_TOPIC:
            return self.activity_auditor.is_auditing(realm, topic)
        return False
