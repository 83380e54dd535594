import asyncio
import json
from dataclasses import replace

import pytest
from aiohttp import web

from src.data.transactions_fetcher import TransactionsFetcher
from src.errors import ApiError, ParseError, QueryValidationError, RequestTimeoutError, TransportError
from src.reason_codes import ErrorCategory

TRANSACTIONS_PATH = '/balancesandmovements/accountinformation/transaction/v1/gettransactions'

SUCCESS_BODY = {
    'result': {'returnCode': '0000', 'reasonCode': '0', 'messageText': 'OK'},
    'transactions': [
        {
            'customerName': 'Jane Doe',
            'activityDate': '2020-12-25',
            'amount': '100.00',
            'currencyCode': 'TRY',
            'txnCreditDebitIndicator': 'A',
            'explanation': 'deposit',
            'balanceAfterTransaction': '500.00',
            'transactionId': 't1',
        }
    ],
}


@pytest.mark.anyio
async def test_fetch_transactions_success(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (200, SUCCESS_BODY)})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)), timeout=5)
        result = await fetcher.fetch_transactions(token, query)

    assert result.return_code == '0000'
    assert result.reason_code == 0
    assert result.message_text == 'OK'
    assert len(result.transactions) == 1
    tx = result.transactions[0]
    assert tx.customer_name == 'Jane Doe'
    assert tx.amount == '100.00'
    assert tx.is_credit

    [request] = app['requests']
    assert request['headers']['Authorization'] == 'Bearer abc'
    assert request['headers']['Content-Type'].startswith('application/json')
    assert json.loads(request['body']) == query.to_wire()


@pytest.mark.anyio
async def test_fetch_transactions_bad_request_with_reason_code(serve, canned_app, token, query):
    body = {'result': {'returnCode': '9999', 'reasonCode': 18, 'messageText': 'Date range error'}}
    app = canned_app({TRANSACTIONS_PATH: (400, body)})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ApiError) as exc_info:
            # sent as-is so the server's verdict is what we see
            await fetcher.fetch_transactions(token, query, validate=False)

    error = exc_info.value
    assert error.http_status == 400
    assert error.reason_code == 18
    assert error.message_text == 'Date range error'
    assert error.category is ErrorCategory.BAD_REQUEST
    assert '30 days' in error.reason_message


@pytest.mark.anyio
@pytest.mark.parametrize('status, category', [
    (401, ErrorCategory.UNAUTHORIZED),
    (403, ErrorCategory.FORBIDDEN),
    (429, ErrorCategory.RATE_LIMITED),
    (500, ErrorCategory.SERVER_ERROR),
    (405, ErrorCategory.UNKNOWN),
    (502, ErrorCategory.UNKNOWN),
])
async def test_fetch_transactions_classifies_status(serve, canned_app, token, query, status, category):
    app = canned_app({TRANSACTIONS_PATH: (status, {'result': {'returnCode': '9999'}})})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ApiError) as exc_info:
            await fetcher.fetch_transactions(token, query)

    assert exc_info.value.http_status == status
    assert exc_info.value.category is category
    assert exc_info.value.reason_code is None


@pytest.mark.anyio
async def test_fetch_transactions_error_with_text_body(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (503, 'Service Unavailable')})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ApiError) as exc_info:
            await fetcher.fetch_transactions(token, query)

    assert exc_info.value.body == 'Service Unavailable'
    assert exc_info.value.reason_code is None


@pytest.mark.anyio
async def test_fetch_transactions_non_json_body(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (200, 'not json at all')})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ParseError):
            await fetcher.fetch_transactions(token, query)


@pytest.mark.anyio
async def test_fetch_transactions_rejects_long_range_before_sending(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (200, SUCCESS_BODY)})
    long_range = replace(query, start_date='2020-11-01T00:00:00', end_date='2020-12-25T00:00:00')

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(QueryValidationError) as exc_info:
            await fetcher.fetch_transactions(token, long_range)

    assert exc_info.value.reason_code == 18
    assert app['requests'] == []


@pytest.mark.anyio
async def test_fetch_transactions_empty_page(serve, canned_app, token, query):
    body = {'result': {'returnCode': '0000', 'reasonCode': '0', 'messageText': 'OK'}}
    app = canned_app({TRANSACTIONS_PATH: (200, body)})

    async with serve(app) as server:
        result = await TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH))).fetch_transactions(token, query)

    assert result.transactions == ()


@pytest.mark.anyio
async def test_fetch_transactions_error_with_undecodable_body(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (502, b'\x80\x81 gateway')})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ApiError) as exc_info:
            await fetcher.fetch_transactions(token, query)

    assert exc_info.value.http_status == 502
    assert 'gateway' in exc_info.value.body


@pytest.mark.anyio
async def test_fetch_transactions_result_not_an_object(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (200, {'result': 'OK', 'transactions': 'none'})})

    async with serve(app) as server:
        result = await TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH))).fetch_transactions(token, query)

    assert result.return_code is None
    assert result.reason_code is None
    assert result.transactions == ()
    assert not result.has_result


@pytest.mark.anyio
async def test_fetch_transactions_error_result_not_an_object(serve, canned_app, token, query):
    app = canned_app({TRANSACTIONS_PATH: (400, {'result': ['reasonCode', 18]})})

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)))
        with pytest.raises(ApiError) as exc_info:
            await fetcher.fetch_transactions(token, query)

    assert exc_info.value.http_status == 400
    assert exc_info.value.reason_code is None
    assert exc_info.value.message_text is None


@pytest.mark.anyio
async def test_fetch_transactions_timeout(serve, token, query):
    async def slow(request):
        await asyncio.sleep(2)
        return web.json_response(SUCCESS_BODY)

    app = web.Application()
    app.router.add_post(TRANSACTIONS_PATH, slow)

    async with serve(app) as server:
        fetcher = TransactionsFetcher(str(server.make_url(TRANSACTIONS_PATH)), timeout=0.2)
        with pytest.raises(RequestTimeoutError):
            await fetcher.fetch_transactions(token, query)


@pytest.mark.anyio
async def test_fetch_transactions_connection_refused(serve, token, query):
    async with serve(web.Application()) as server:
        url = str(server.make_url(TRANSACTIONS_PATH))

    with pytest.raises(TransportError):
        await TransactionsFetcher(url, timeout=2).fetch_transactions(token, query)
