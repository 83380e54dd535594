"""Local stand-in for the Garanti BBVA sandbox, used for offline runs and tests.

Mirrors the upstream contract: client credentials are checked, every issued
token is good for exactly one transactions call, and queries are rejected with
the documented business reason codes.
"""

import logging
import secrets
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from aiohttp import web

from ..errors import QueryValidationError
from ..data.models import TransactionQuery
from ..reason_codes import describe_reason_code

logger = logging.getLogger(__name__)

TOKEN_PATH = '/auth/oauth/v2/token'
TRANSACTIONS_PATH = '/balancesandmovements/accountinformation/transaction/v1/gettransactions'

SANDBOX_CLIENT_ID = 'offline-client'
SANDBOX_CLIENT_SECRET = 'offline-secret'

SAMPLE_TRANSACTIONS: List[Dict[str, Any]] = [
    {
        'customerName': 'Jane Doe',
        'activityDate': '2020-12-25',
        'valueDate': '2020-12-25',
        'amount': '100.00',
        'currencyCode': 'TRY',
        'txnCreditDebitIndicator': 'A',
        'explanation': 'deposit',
        'balanceAfterTransaction': '500.00',
        'transactionId': 't1',
        'classificationCode': 'DEP',
        'enrichmentInformation': [{'code': 'CHANNEL', 'value': 'ATM'}],
    },
    {
        'customerName': 'Jane Doe',
        'activityDate': '2020-12-25',
        'valueDate': '2020-12-26',
        'amount': '25.50',
        'currencyCode': 'TRY',
        'txnCreditDebitIndicator': 'B',
        'explanation': 'card payment',
        'balanceAfterTransaction': '474.50',
        'transactionId': 't2',
        'classificationCode': 'POS',
        'enrichmentInformation': [],
    },
]


def _result(return_code: str, reason_code: Any, message: str) -> Dict[str, Any]:
    return {'result': {'returnCode': return_code, 'reasonCode': str(reason_code), 'messageText': message}}


async def _handle_token(request: web.Request) -> web.Response:
    form = await request.post()
    state = request.app['state']
    if (
        form.get('grant_type') != 'client_credentials'
        or form.get('client_id') != state['client_id']
        or form.get('client_secret') != state['client_secret']
    ):
        return web.json_response(
            {'error': 'invalid_client', 'error_description': 'Client authentication failed'}, status=401
        )

    token = secrets.token_urlsafe(24)
    state['issued'].add(token)
    logger.info(f"Mock bank issued token {token[:8]}...")
    return web.json_response({
        'access_token': token,
        'token_type': 'Bearer',
        'expires_in': state['expires_in'],
        'scope': form.get('scope', ''),
    })


async def _handle_transactions(request: web.Request) -> web.Response:
    state = request.app['state']
    auth = request.headers.get('Authorization', '')
    token = auth[len('Bearer '):] if auth.startswith('Bearer ') else ''
    if token not in state['issued'] or token in state['used']:
        return web.json_response(_result('9999', 0, 'Access token invalid, expired or already used'), status=401)
    # Tokens are single-use, whatever the outcome of the call
    state['used'].add(token)

    try:
        query = TransactionQuery.from_wire(await request.json())
    except (ValueError, TypeError):
        return web.json_response(_result('9999', 19, 'Request body is not a valid query'), status=400)
    if query.consent_id != state['consent_id']:
        return web.json_response(_result('9999', 4, describe_reason_code(4)), status=400)
    try:
        query.validate()
    except QueryValidationError as e:
        message = describe_reason_code(e.reason_code) or str(e)
        return web.json_response(_result('9999', e.reason_code or 19, message), status=400)

    start = (query.page_index - 1) * query.page_size
    transactions = state['transactions']
    if query.transaction_id:
        transactions = [tx for tx in transactions if tx.get('transactionId') == query.transaction_id]
    page = transactions[start:start + query.page_size]
    return web.json_response({**_result('0000', 0, 'OK'), 'transactions': page})


def create_mock_app(
    client_id: str = SANDBOX_CLIENT_ID,
    client_secret: str = SANDBOX_CLIENT_SECRET,
    consent_id: str = '3e09da8a-ae9c-50bc-b34a-c61531729dbe',
    transactions: Optional[List[Dict[str, Any]]] = None,
    expires_in: int = 3600,
) -> web.Application:
    """Build the mock bank application with both endpoints."""
    app = web.Application()
    app.add_routes([
        web.post(TOKEN_PATH, _handle_token),
        web.post(TRANSACTIONS_PATH, _handle_transactions),
    ])
    app['state'] = {
        'client_id': client_id,
        'client_secret': client_secret,
        'consent_id': consent_id,
        'transactions': list(SAMPLE_TRANSACTIONS if transactions is None else transactions),
        'expires_in': expires_in,
        'issued': set(),
        'used': set(),
    }
    return app


@asynccontextmanager
async def serve_mock_bank(host: str = '127.0.0.1', port: int = 0, **app_kwargs: Any) -> AsyncIterator[str]:
    """Run the mock bank for the duration of the block and yield its base URL."""
    runner = web.AppRunner(create_mock_app(**app_kwargs))
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    bound_host, bound_port = runner.addresses[0][:2]
    base_url = f"http://{bound_host}:{bound_port}"
    logger.info(f"Mock bank listening on {base_url}")
    try:
        yield base_url
    finally:
        await runner.cleanup()
