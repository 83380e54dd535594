"""Client for the Garanti BBVA Account Transactions endpoint."""

import json
import logging
from typing import Any

from .. import http
from ..auth.token_provider import AccessToken
from ..errors import ApiError, ParseError
from ..reason_codes import normalize_reason_code
from .models import ApiResult, TransactionQuery

logger = logging.getLogger(__name__)


class TransactionsFetcher:
    """Fetches one page of account transactions with a single-use token."""

    def __init__(self, transactions_url: str, timeout: float = 30, debug: bool = False):
        """
        Initialize transactions fetcher.

        Args:
            transactions_url: Absolute URL of the gettransactions endpoint.
            timeout: Seconds allowed for the request.
            debug: Log the full request body.
        """
        self.transactions_url = transactions_url
        self.timeout = timeout
        self.debug = debug

    async def fetch_transactions(
        self,
        token: AccessToken,
        query: TransactionQuery,
        *,
        validate: bool = True,
    ) -> ApiResult:
        """
        Call the API once with ``token`` and return the parsed result.

        Args:
            token: Fresh access token; it is consumed by this call.
            query: The page of transactions to request.
            validate: Reject queries the API would refuse before sending them.

        Raises:
            QueryValidationError: ``validate`` is set and the query breaks an API rule.
            ApiError: Any non-200 status; ``category`` tells what kind.
            ParseError: 200 response whose body is not JSON.
            TransportError: Network failure (RequestTimeoutError on timeout).
        """
        if validate:
            query.validate()

        body = query.to_wire()
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'Authorization': token.authorization_header,
        }

        logger.info(f"Making API call to: {self.transactions_url}")
        logger.info(f"Using Bearer token: {token.preview}")
        if self.debug:
            logger.debug(f"Request data: {json.dumps(body, indent=2)}")

        status, text = await http.post(
            self.transactions_url,
            timeout=self.timeout,
            headers=headers,
            json=body,
        )
        logger.info(f"API response status: {status}")

        if status != 200:
            raise self._api_error(status, text)

        try:
            payload = json.loads(text)
        except ValueError:
            logger.error(f"Failed to parse API response: {text!r}")
            raise ParseError('Transactions response is not valid JSON', body=text)
        if not isinstance(payload, dict):
            raise ParseError('Transactions response is not a JSON object', body=text)

        result = ApiResult.from_api(payload)
        logger.info(f"API call successful, {len(result.transactions)} transactions returned")
        return result

    @staticmethod
    def _api_error(status: int, text: str) -> ApiError:
        payload: Any
        try:
            payload = json.loads(text)
        except ValueError:
            # plain-text or HTML error page
            payload = text

        reason_code = None
        message_text = None
        if isinstance(payload, dict):
            result = payload.get('result')
            if not isinstance(result, dict):
                result = {}
            reason_code = normalize_reason_code(result.get('reasonCode'))
            message_text = result.get('messageText')

        error = ApiError(status, reason_code, message_text, body=payload)
        logger.error(f"API call failed: {error} [{error.category.title}]")
        return error
