"""Tests for realm resolution, resource values and error payloads."""
import pytest

from realm_services.core.exceptions import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    NotSupportedError,
)
from realm_services.core.realm import ROOT_REALM, get_realm, normalize_realm
from realm_services.core.resources import RequestContext, Resource, revision_of


@pytest.mark.parametrize("raw, expected", [
    (None, "/"),
    ("", "/"),
    ("/", "/"),
    ("root", "/"),
    ("/root/sub", "/sub"),
    ("sub", "/sub"),
    ("/sub/", "/sub"),
    ("sub//child", "/sub/child"),
])
def test_normalize_realm(raw, expected):
    assert normalize_realm(raw) == expected


def test_get_realm_defaults_to_root():
    assert get_realm(RequestContext()) == ROOT_REALM
    assert get_realm(RequestContext(realm="/sub")) == "/sub"


def test_resource_to_dict_adds_metadata():
    resource = Resource("google", "abc", {"name": "google"})
    assert resource.to_dict() == {"_id": "google", "_rev": "abc", "name": "google"}


def test_revision_is_stable_and_content_sensitive():
    assert revision_of({"a": 1, "b": 2}) == revision_of({"b": 2, "a": 1})
    assert revision_of({"a": 1}) != revision_of({"a": 2})


@pytest.mark.parametrize("error_class, status, reason", [
    (BadRequestError, 400, "Bad Request"),
    (NotFoundError, 404, "Not Found"),
    (InternalServerError, 500, "Internal Server Error"),
    (NotSupportedError, 501, "Not Implemented"),
])
def test_error_payload(error_class, status, reason):
    error = error_class("message")
    assert error.status == status
    assert error.to_dict() == {"code": status, "reason": reason, "message": "message"}


def test_error_keeps_cause():
    cause = RuntimeError("boom")
    error = InternalServerError("Unable to handle read", cause)
    assert error.cause is cause
    assert str(error) == "Unable to handle read"
