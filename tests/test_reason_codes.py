import pytest

from src.errors import ApiError, AuthError, ParseError, QueryValidationError, RequestTimeoutError, TransportError
from src.dashboard.diagnostics import FailureKind, diagnose, next_steps
from src.reason_codes import REASON_CODES, ErrorCategory, classify_status, describe_reason_code


def test_reason_code_table_covers_documented_codes():
    assert set(REASON_CODES) == {2, 4, 5, 6, 13, 15, 18, 19, 21, 30}


def test_reason_code_18_mentions_thirty_days():
    assert '30 days' in describe_reason_code(18)


@pytest.mark.parametrize('code', [18, '18', ' 18 '])
def test_describe_reason_code_accepts_strings(code):
    assert describe_reason_code(code) == REASON_CODES[18]


@pytest.mark.parametrize('code', [None, 0, 99, 'abc'])
def test_describe_unknown_reason_code(code):
    assert describe_reason_code(code) is None


@pytest.mark.parametrize('status, category', [
    (400, ErrorCategory.BAD_REQUEST),
    (401, ErrorCategory.UNAUTHORIZED),
    (403, ErrorCategory.FORBIDDEN),
    (429, ErrorCategory.RATE_LIMITED),
    (500, ErrorCategory.SERVER_ERROR),
    (404, ErrorCategory.UNKNOWN),
    (None, ErrorCategory.UNKNOWN),
])
def test_classify_status(status, category):
    assert classify_status(status) is category


@pytest.mark.parametrize('error, kind', [
    (AuthError('invalid_client', status=401), FailureKind.CREDENTIALS),
    (ApiError(401), FailureKind.CONSENT),
    (ApiError(403), FailureKind.CONSENT),
    (ApiError(400, reason_code=4), FailureKind.CONSENT),
    (ApiError(400, reason_code=18), FailureKind.QUERY),
    (QueryValidationError('too long', reason_code=18), FailureKind.QUERY),
    (TransportError('refused'), FailureKind.NETWORK),
    (RequestTimeoutError('slow'), FailureKind.NETWORK),
    (ApiError(500), FailureKind.SERVER),
    (ApiError(503), FailureKind.SERVER),
    (ApiError(429), FailureKind.SERVER),
    (ParseError('garbage'), FailureKind.UNKNOWN),
    (RuntimeError('boom'), FailureKind.UNKNOWN),
])
def test_diagnose(error, kind):
    assert diagnose(error) is kind


def test_next_steps_always_end_with_support_contact():
    steps = next_steps(AuthError('invalid_client'))
    assert 'OAUTH_CLIENT_ID' in steps[0]
    assert steps[-1].startswith('Contact support')


def test_request_timeout_is_a_builtin_timeout():
    assert isinstance(RequestTimeoutError('slow'), TimeoutError)
