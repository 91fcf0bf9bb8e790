"""Error Hierarchy — tests for status classes and conversions."""

from dataclasses import fields

from ezwallet.core.domain_types import AuthCause, StatusClass
from ezwallet.core.errors import (
    AuthDecodeError,
    CapabilityDeniedError,
    ConcurrencyError,
    ConflictError,
    ErrorContext,
    MismatchedIdentityError,
    NotFoundError,
    ReauthenticationRequiredError,
    ValidationError,
    error_from_cause,
    error_from_rejection,
)


def test_client_errors_are_400():
    for error in (
        ValidationError("bad"), NotFoundError("User", "x"), ConflictError("dup"),
    ):
        assert error.http_status == 400
        assert error.status_class == StatusClass.CLIENT_ERROR


def test_session_errors_are_unauthorized():
    error = ReauthenticationRequiredError()
    assert error.http_status == 401
    assert error.status_class == StatusClass.UNAUTHORIZED
    assert error.message == "Perform login again"


def test_concurrency_error_is_409():
    assert ConcurrencyError("raced").http_status == 409


def test_error_from_cause_maps_each_family():
    assert isinstance(error_from_cause(AuthCause.MISMATCHED_IDENTITY), MismatchedIdentityError)
    assert isinstance(
        error_from_cause(AuthCause.REAUTHENTICATION_REQUIRED), ReauthenticationRequiredError,
    )
    assert isinstance(error_from_cause(AuthCause.NOT_ADMIN), CapabilityDeniedError)
    assert isinstance(error_from_cause(AuthCause.DECODE_ERROR), AuthDecodeError)
    assert error_from_cause(AuthCause.NOT_IN_GROUP).code == "NOT_IN_GROUP"


def test_error_from_rejection_builds_typed_errors():
    conflict = error_from_rejection({
        "error_code": "LAST_CATEGORY", "category": "conflict", "message": "only one",
    })
    assert isinstance(conflict, ConflictError)
    assert conflict.code == "LAST_CATEGORY"

    invalid = error_from_rejection({
        "error_code": "EMPTY_EMAIL", "category": "validation",
        "message": "empty", "field": "emails",
    })
    assert isinstance(invalid, ValidationError)
    assert invalid.field == "emails"


def test_to_response_carries_status_class():
    body = NotFoundError("Group", "g").to_response()
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert body["error"]["message"] == "Group 'g' not found"
    assert body["error"]["status_class"] == "ClientError"


def test_error_context_carries_only_the_timestamp():
    assert [f.name for f in fields(ErrorContext)] == ["timestamp"]
    body = ValidationError("bad").to_response()
    assert "timestamp" in body["error"]
