"""OAuth 2.0 client-credentials token acquisition for the Garanti BBVA API."""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .. import http
from ..errors import AuthError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """OAuth client credentials registered in the developer portal."""
    client_id: str
    client_secret: str = field(repr=False)
    grant_type: str = 'client_credentials'
    scope: str = 'oob'

    def to_form(self) -> Dict[str, str]:
        return {
            'grant_type': self.grant_type,
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'scope': self.scope,
        }


@dataclass(frozen=True)
class AccessToken:
    """
    Bearer token returned by the token endpoint.

    Garanti BBVA tokens are single-use: each one is good for exactly one
    downstream API call, so a fresh token must be fetched per request.
    """
    value: str = field(repr=False)
    expires_in: Optional[int] = None
    token_type: str = 'Bearer'

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"

    @property
    def preview(self) -> str:
        return f"{self.value[:20]}..."


class TokenProvider:
    """Exchanges client credentials for a fresh single-use access token."""

    def __init__(self, credentials: Credentials, token_url: str, timeout: float = 30):
        """
        Initialize token provider.

        Args:
            credentials: OAuth client credentials.
            token_url: Absolute URL of the OAuth token endpoint.
            timeout: Seconds allowed for the token request.
        """
        self.credentials = credentials
        self.token_url = token_url
        self.timeout = timeout

    async def fetch_token(self) -> AccessToken:
        """
        Request a new access token. Nothing is cached between calls.

        Returns:
            The freshly issued AccessToken.

        Raises:
            AuthError: Credentials missing or rejected, or no access_token in the response.
            ParseError: Success status with a body that is not JSON.
            TransportError: Network failure (RequestTimeoutError on timeout).
        """
        if not self.credentials.client_id or not self.credentials.client_secret:
            raise AuthError('invalid_client', 'OAuth client id/secret are not configured')

        logger.info(f"Getting OAuth token from: {self.token_url}")
        logger.info(f"Client ID: {self.credentials.client_id}, scope: {self.credentials.scope}")

        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            'Accept': 'application/json',
        }
        status, body = await http.post(
            self.token_url,
            timeout=self.timeout,
            headers=headers,
            data=self.credentials.to_form(),
        )
        logger.info(f"Token response status: {status}")

        if status != 200:
            error, description = _oauth_error_fields(body)
            logger.error(f"Token request failed: {status} - {body}")
            raise AuthError(error or 'token_request_failed', description or f"HTTP {status}", status=status)

        try:
            payload = json.loads(body)
        except ValueError:
            logger.error(f"Failed to parse token response: {body!r}")
            raise ParseError('Token response is not valid JSON', body=body)

        access_token = payload.get('access_token') if isinstance(payload, dict) else None
        if not access_token:
            raise AuthError('invalid_token_response', 'Response has no access_token', status=status)

        token = AccessToken(
            value=access_token,
            expires_in=_expiry_hint(payload.get('expires_in')),
            token_type=payload.get('token_type') or 'Bearer',
        )
        logger.info(f"Fresh token obtained: {token.preview}")
        if token.expires_in is not None:
            logger.info(f"Token expires in: {token.expires_in} seconds")
        return token


def _expiry_hint(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unparseable expires_in: {value!r}")
        return None


def _oauth_error_fields(body: str):
    """Extract (error, error_description) from an OAuth error document, if any."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(payload, dict):
        return None, None
    return payload.get('error'), payload.get('error_description')
