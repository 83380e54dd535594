from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from src.auth.token_provider import AccessToken, Credentials
from src.data.models import TransactionQuery

TOKEN_PATH = '/auth/oauth/v2/token'
TRANSACTIONS_PATH = '/balancesandmovements/accountinformation/transaction/v1/gettransactions'


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def serve():
    """Serve an aiohttp app on an ephemeral local port: ``async with serve(app) as server``."""

    @asynccontextmanager
    async def _serve(app: web.Application):
        server = TestServer(app)
        await server.start_server()
        try:
            yield server
        finally:
            await server.close()

    return _serve


def _canned_app(routes):
    """App answering each path with a fixed (status, json, text or raw bytes body) and recording requests."""
    app = web.Application()
    app['requests'] = []

    def _make_handler(path, status, body):
        async def handler(request: web.Request) -> web.Response:
            raw = await request.read()
            app['requests'].append({'path': path, 'headers': dict(request.headers), 'body': raw})
            if isinstance(body, bytes):
                return web.Response(status=status, body=body, content_type='text/plain')
            if isinstance(body, str):
                return web.Response(status=status, text=body)
            return web.json_response(body, status=status)
        return handler

    for path, (status, body) in routes.items():
        app.router.add_post(path, _make_handler(path, status, body))
    return app


@pytest.fixture
def canned_app():
    return _canned_app


@pytest.fixture
def credentials():
    return Credentials(client_id='cid', client_secret='csecret')


@pytest.fixture
def token():
    return AccessToken(value='abc', expires_in=3600)


@pytest.fixture
def query():
    return TransactionQuery(
        consent_id='3e09da8a-ae9c-50bc-b34a-c61531729dbe',
        unit_num='295',
        account_num='6291296',
        iban='TR620006200029500006291296',
        start_date='2020-12-25T12:53:07.867',
        end_date='2020-12-25T17:53:07.867',
    )
