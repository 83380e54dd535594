"""Error taxonomy for the Garanti BBVA API check."""

from typing import Any, Optional

from authlib.integrations.base_client import OAuthError

from .reason_codes import ErrorCategory, classify_status, describe_reason_code


class GarantiApiError(Exception):
    """Base class for every failure raised by the API clients."""


class TransportError(GarantiApiError):
    """DNS, connection or other network-level failure."""


class RequestTimeoutError(TransportError, TimeoutError):
    """No response arrived within the configured request timeout."""


class ParseError(GarantiApiError):
    """A success response whose body is not valid JSON."""

    def __init__(self, message: str, body: str = ''):
        super().__init__(message)
        self.body = body


class AuthError(OAuthError, GarantiApiError):
    """The token endpoint rejected the client credentials exchange."""

    def __init__(
        self,
        error: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(error=error, description=description)
        self.status = status


class ApiError(GarantiApiError):
    """The transactions endpoint answered with a non-success HTTP status."""

    def __init__(
        self,
        http_status: int,
        reason_code: Optional[int] = None,
        message_text: Optional[str] = None,
        body: Any = None,
    ):
        self.http_status = http_status
        self.reason_code = reason_code
        self.message_text = message_text
        self.body = body
        detail = f" (reason code {reason_code})" if reason_code is not None else ''
        text = f": {message_text}" if message_text else ''
        super().__init__(f"API call failed with HTTP {http_status}{detail}{text}")

    @property
    def category(self) -> ErrorCategory:
        return classify_status(self.http_status)

    @property
    def reason_message(self) -> Optional[str]:
        return describe_reason_code(self.reason_code)


class QueryValidationError(GarantiApiError):
    """A transaction query that the remote service would reject."""

    def __init__(self, message: str, reason_code: Optional[int] = None):
        super().__init__(message)
        self.reason_code = reason_code
