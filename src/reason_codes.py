"""Lookup tables for Garanti BBVA business reason codes and HTTP statuses."""

from enum import Enum
from typing import Any, Dict, Optional


# Business logic error codes from the Garanti BBVA API documentation
REASON_CODES: Dict[int, str] = {
    2: 'Consent ID is required',
    4: 'Client/Consent ID mismatch',
    5: 'Branch and Account numbers must be sent together',
    6: 'Account information is incorrect',
    13: 'Account and IBAN information mismatch',
    15: 'Transaction ID information is incorrect',
    18: 'Date range cannot exceed 30 days',
    19: 'Date information is incorrect',
    21: 'Date format is incorrect',
    30: 'Page size cannot exceed 500',
}

# Reason codes that point at the consent rather than the query itself
CONSENT_REASON_CODES = frozenset({2, 4})


class ErrorCategory(Enum):
    """Advisory classification of a failed transactions call."""

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    RATE_LIMITED = 429
    SERVER_ERROR = 500
    UNKNOWN = None

    @property
    def title(self) -> str:
        return _CATEGORY_TITLES[self]


_CATEGORY_TITLES = {
    ErrorCategory.BAD_REQUEST: 'Bad Request',
    ErrorCategory.UNAUTHORIZED: 'Unauthorized',
    ErrorCategory.FORBIDDEN: 'Forbidden',
    ErrorCategory.RATE_LIMITED: 'Rate Limit',
    ErrorCategory.SERVER_ERROR: 'Internal Server Error',
    ErrorCategory.UNKNOWN: 'Unexpected error',
}


def classify_status(status: Optional[int]) -> ErrorCategory:
    """Map an HTTP status code onto an ErrorCategory (UNKNOWN for anything else)."""
    for category in ErrorCategory:
        if category.value is not None and category.value == status:
            return category
    return ErrorCategory.UNKNOWN


def normalize_reason_code(code: Any) -> Optional[int]:
    """Return the reason code as int; the API sends both ``18`` and ``"18"``."""
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, int):
        return code
    try:
        return int(str(code).strip())
    except ValueError:
        return None


def describe_reason_code(code: Any) -> Optional[str]:
    """Human-readable explanation for a reason code, or None if it is not documented."""
    normalized = normalize_reason_code(code)
    if normalized is None:
        return None
    return REASON_CODES.get(normalized)
