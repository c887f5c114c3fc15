"""Tests for the legacy authentication audit translator."""
from unittest.mock import MagicMock

import pytest

from realm_services.core.audit import (
    ACTIVITY_TOPIC,
    AUTHENTICATION_TOPIC,
    ActivityAuditor,
    AuditConfig,
    AuthenticationAuditor,
    LegacyAuthenticationEventAuditor,
    MemoryAuditSink,
)


def _auditor(sink, config=None):
    return LegacyAuthenticationEventAuditor(
        AuthenticationAuditor(sink, config),
        ActivityAuditor(sink, config),
    )


@pytest.fixture()
def sink():
    return MemoryAuditSink()


def _audit(auditor, event_name="LOGIN_SUCCESS", **overrides):
    args = dict(
        event_description="AM-LOGIN-COMPLETED",
        transaction_id="tx-1",
        authentication="id=alice,ou=user",
        realm_name="/",
        time=1700000000000,
        contexts={"session": "s-1"},
        entries=[{"moduleId": "DataStore"}],
    )
    args.update(overrides)
    return auditor.audit(event_name, **args)


def test_authentication_event_published(sink):
    assert _audit(_auditor(sink)) is True

    event = sink.events[0]
    assert event.topic == AUTHENTICATION_TOPIC
    assert event.value == {
        "eventName": "AM-LOGIN-COMPLETED",
        "transactionId": "tx-1",
        "userId": "id=alice,ou=user",
        "timestamp": 1700000000000,
        "component": "Authentication",
        "realm": "/",
        "contexts": {"session": "s-1"},
        "entries": [{"moduleId": "DataStore"}],
    }


def test_password_change_is_activity_event_without_entries(sink):
    assert _audit(_auditor(sink), "CHANGE_USER_PASSWORD_SUCCEEDED") is True

    event = sink.events[0]
    assert event.topic == ACTIVITY_TOPIC
    assert "entries" not in event.value
    assert event.value["component"] == "Authentication"


def test_unknown_and_missing_names_are_authentication_events(sink):
    auditor = _auditor(sink)
    _audit(auditor, "SOMETHING_NEW")
    _audit(auditor, None)

    assert [event.topic for event in sink.events] == [AUTHENTICATION_TOPIC, AUTHENTICATION_TOPIC]


def test_empty_optional_fields_are_omitted(sink):
    _audit(_auditor(sink), event_description="", realm_name="", contexts={}, entries=[])

    value = sink.events[0].value
    for key in ("eventName", "realm", "contexts", "entries"):
        assert key not in value


def test_missing_time_uses_current_time(sink):
    _audit(_auditor(sink), time=None)
    assert sink.events[0].value["timestamp"] > 1700000000000


@pytest.mark.parametrize("field", ["transaction_id", "authentication"])
def test_required_fields(sink, field):
    with pytest.raises(ValueError):
        _audit(_auditor(sink), **{field: None})
    assert sink.events == []


def test_publish_failure_returns_false():
    sink = MagicMock()
    sink.publish.side_effect = OSError("disk full")

    assert _audit(_auditor(sink)) is False
    assert _audit(_auditor(sink), "CHANGE_USER_PASSWORD_SUCCEEDED") is False


def test_disabled_topic_is_dropped_but_successful(sink):
    auditor = _auditor(sink, AuditConfig(topics=frozenset({ACTIVITY_TOPIC})))

    assert _audit(auditor) is True
    assert sink.events == []


def test_excluded_realm_is_not_audited(sink):
    auditor = _auditor(sink, AuditConfig(excluded_realms=frozenset({"/internal"})))

    _audit(auditor, realm_name="internal")

    assert sink.events == []
    assert auditor.is_auditing("/internal") is False
    assert auditor.is_auditing("/") is True


@pytest.mark.parametrize("excluded", ["sub", "sub/", "/root/sub"])
def test_excluded_realm_spelling_is_normalized(sink, excluded):
    auditor = AuthenticationAuditor(sink, AuditConfig(excluded_realms=frozenset({excluded})))

    assert auditor.config.excluded_realms == frozenset({"/sub"})
    assert auditor.is_auditing("/sub", AUTHENTICATION_TOPIC) is False
    assert auditor.is_auditing("/", AUTHENTICATION_TOPIC) is True


def test_is_auditing_by_topic(sink):
    auditor = _auditor(sink, AuditConfig(topics=frozenset({AUTHENTICATION_TOPIC})))

    assert auditor.is_auditing("/", AUTHENTICATION_TOPIC) is True
    assert auditor.is_auditing("/", ACTIVITY_TOPIC) is False
    assert auditor.is_auditing("/", "config") is False
    assert auditor.is_auditing("/") is True


def test_is_auditing_when_disabled(sink):
    auditor = _auditor(sink, AuditConfig(enabled=False))
    assert auditor.is_auditing("/") is False


@pytest.mark.parametrize("name", [
    "LOGOUT", "LOGOUT_USER", "LOGOUT_ROLE", "LOGOUT_SERVICE", "LOGOUT_LEVEL", "LOGOUT_MODULE_INSTANCE",
])
def test_logout_events(sink, name):
    assert _auditor(sink).is_logout_event(name) is True


@pytest.mark.parametrize("name", ["LOGIN_SUCCESS", "", None, "logout"])
def test_non_logout_events(sink, name):
    assert _auditor(sink).is_logout_event(name) is False
