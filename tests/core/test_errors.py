"""Error Hierarchy — verifies codes, statuses and the response envelope.

Tests:
    - Each service error carries its HTTP status and stable code
    - to_response() renders the {"error": {...}} envelope with field when set
    - Storage errors are disjoint from UserApiError (they never render as 4xx)
"""

from userapi.core.errors import (
    DuplicateEmailError,
    DuplicateKeyError,
    DuplicateUserIdError,
    ErrorCategory,
    ErrorContext,
    InvalidInputError,
    NotFoundError,
    RepositoryError,
    UserApiError,
    UserNotFoundError,
)


def test_invalid_input_is_400_validation():
    err = InvalidInputError("email is required", field="email")
    assert err.http_status == 400
    assert err.code == "INVALID_INPUT"
    assert err.category == ErrorCategory.VALIDATION
    assert err.field == "email"


def test_user_not_found_is_404_and_keeps_user_id():
    err = UserNotFoundError("u-1")
    assert err.http_status == 404
    assert err.code == "USER_NOT_FOUND"
    assert err.message == "User not found"
    assert err.context.user_id == "u-1"


def test_duplicate_email_is_409_conflict():
    err = DuplicateEmailError()
    assert err.http_status == 409
    assert err.code == "DUPLICATE_EMAIL"
    assert err.category == ErrorCategory.CONFLICT


def test_duplicate_user_id_is_409_on_id_field():
    err = DuplicateUserIdError("u-1")
    assert err.http_status == 409
    assert err.code == "DUPLICATE_USER_ID"
    assert err.context.field == "id"


def test_to_response_envelope():
    body = DuplicateEmailError().to_response()
    assert set(body) == {"error"}
    error = body["error"]
    assert error["code"] == "DUPLICATE_EMAIL"
    assert error["message"] == "Email already exists"
    assert error["category"] == "conflict"
    assert error["severity"] == "warning"
    assert error["field"] == "email"
    assert "timestamp" in error


def test_to_response_omits_field_when_unset():
    body = UserNotFoundError("u-1").to_response()
    assert "field" not in body["error"]


def test_explicit_context_is_reused():
    ctx = ErrorContext(user_id="u-9")
    err = InvalidInputError("bad", field="id", context=ctx)
    assert err.context is ctx
    assert ctx.field == "id"


def test_storage_errors_are_not_api_errors():
    assert not issubclass(RepositoryError, UserApiError)
    assert isinstance(NotFoundError("user", "u-1"), RepositoryError)
    assert isinstance(DuplicateKeyError("user", "email"), RepositoryError)


def test_storage_errors_describe_what_failed():
    nf = NotFoundError("user", "u-1")
    dup = DuplicateKeyError("user", "email")
    assert nf.key == "u-1"
    assert "u-1" in str(nf)
    assert dup.field == "email"
    assert str(dup) == "user with this email already exists"
