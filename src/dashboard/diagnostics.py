"""Turns a failed check into a diagnosis and a list of next steps."""

from enum import Enum
from typing import List

from ..errors import (
    ApiError,
    AuthError,
    GarantiApiError,
    QueryValidationError,
    TransportError,
)
from ..reason_codes import CONSENT_REASON_CODES, ErrorCategory

SUPPORT_CONTACT = 'ETicaretDestek@garantibbva.com.tr'


class FailureKind(Enum):
    CREDENTIALS = 'credential issue'
    CONSENT = 'consent issue'
    QUERY = 'request data issue'
    NETWORK = 'network issue'
    SERVER = 'server-side issue'
    UNKNOWN = 'unknown issue'


NEXT_STEPS = {
    FailureKind.CREDENTIALS: [
        'Double-check OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET',
        'Verify the credentials are active in the developer portal',
        'Check whether the application approval status changed',
        'Validate the .env configuration',
    ],
    FailureKind.CONSENT: [
        'Confirm the consent ID is valid for your client and account',
        'Check that the application is approved for the Account Transactions API',
        'Make sure a fresh token is used for every call (tokens are single-use)',
    ],
    FailureKind.QUERY: [
        'Keep the date range within 30 days and use ISO dates',
        'Send unit and account numbers together and check they match the IBAN',
        'Keep pageSize at or below 500',
    ],
    FailureKind.NETWORK: [
        'Check network connectivity',
        'Verify the API endpoints are reachable from this machine',
        'Increase REQUEST_TIMEOUT if the sandbox is slow',
    ],
    FailureKind.SERVER: [
        'This is likely a temporary server problem; try again later',
        'Wait before making additional requests if you were rate limited',
    ],
    FailureKind.UNKNOWN: [
        'Re-run with --debug and inspect the raw response',
        'Confirm sandbox environment access',
    ],
}


def diagnose(error: BaseException) -> FailureKind:
    """Classify a failure as a credential, consent, query, network or server problem."""
    if isinstance(error, AuthError):
        return FailureKind.CREDENTIALS
    if isinstance(error, TransportError):
        return FailureKind.NETWORK
    if isinstance(error, QueryValidationError):
        return FailureKind.QUERY
    if isinstance(error, ApiError):
        category = error.category
        if category in (ErrorCategory.UNAUTHORIZED, ErrorCategory.FORBIDDEN):
            return FailureKind.CONSENT
        if category is ErrorCategory.BAD_REQUEST:
            if error.reason_code in CONSENT_REASON_CODES:
                return FailureKind.CONSENT
            return FailureKind.QUERY
        if category in (ErrorCategory.RATE_LIMITED, ErrorCategory.SERVER_ERROR) or error.http_status >= 500:
            return FailureKind.SERVER
    return FailureKind.UNKNOWN


def next_steps(error: BaseException) -> List[str]:
    steps = list(NEXT_STEPS[diagnose(error)])
    if not isinstance(error, GarantiApiError):
        steps.append('Re-run with --debug for the full traceback')
    steps.append(f"Contact support: {SUPPORT_CONTACT}")
    return steps
