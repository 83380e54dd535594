"""
Garanti BBVA Account Transactions API check

Fetches a fresh single-use OAuth token with the client-credentials grant,
calls the Account Transactions API once with it and prints the result.
Exits with status 0 on success and 1 on any failure so it can run in CI.
"""

import argparse
import asyncio
import logging
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import List, Optional

from config.settings import Config, load_config, log_config
from src.auth.token_provider import TokenProvider
from src.data.models import ApiResult
from src.data.transactions_fetcher import TransactionsFetcher
from src.dashboard.console_display import ConsoleDisplay
from src.errors import GarantiApiError
from src.sandbox.mock_server import SANDBOX_CLIENT_ID, SANDBOX_CLIENT_SECRET, serve_mock_bank

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


async def fetch_once(config: Config) -> ApiResult:
    """Run the two-step flow: fresh token first, then exactly one transactions call."""
    token_provider = TokenProvider(
        config.credentials,
        config.api.token_url,
        timeout=config.app.request_timeout,
    )
    fetcher = TransactionsFetcher(
        config.api.transactions_url,
        timeout=config.app.request_timeout,
        debug=config.app.debug,
    )

    # Rejected queries must not consume a token
    config.query.validate()

    # Step 1: get a fresh OAuth token
    token = await token_provider.fetch_token()

    # Step 2: call the API with it
    return await fetcher.fetch_transactions(token, config.query, validate=False)


async def run_check(config: Config, display: ConsoleDisplay, offline: bool = False) -> int:
    """
    Run the check and print the outcome.

    Args:
        config: Loaded configuration.
        display: Where results and failures are rendered.
        offline: Point the check at a local mock bank instead of the sandbox.

    Returns:
        Process exit code: 0 on success, 1 on any failure.
    """
    display.show_banner(config.app.environment, offline=offline)
    try:
        async with AsyncExitStack() as stack:
            if offline:
                base_url = await stack.enter_async_context(serve_mock_bank())
                config = config.with_overrides(
                    api={'base_url': base_url},
                    credentials={'client_id': SANDBOX_CLIENT_ID, 'client_secret': SANDBOX_CLIENT_SECRET},
                )
            log_config(config)
            result = await fetch_once(config)
    except GarantiApiError as e:
        display.show_failure(e)
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        display.show_failure(e)
        return 1

    display.show_result(result)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='garanti-api-check',
        description='Check the Garanti BBVA Account Transactions API end to end.',
    )
    parser.add_argument('--env-file', type=Path, default=None, help='Path to a .env file (default: project .env)')
    parser.add_argument('--debug', action='store_true', help='Verbose logs, request body and enrichment data')
    parser.add_argument('--no-color', action='store_true', help='Disable ANSI colours')
    parser.add_argument('--offline', action='store_true', help='Run against a local mock of the sandbox')
    parser.add_argument('--timeout', type=float, default=None, help='Per-request timeout in seconds')
    parser.add_argument('--start-date', default=None, help='ISO start of the range (max 30 days)')
    parser.add_argument('--end-date', default=None, help='ISO end of the range')
    parser.add_argument('--transaction-id', default=None, help='Only return this transaction')
    parser.add_argument('--page-index', type=int, default=None, help='Page to fetch (starts at 1)')
    parser.add_argument('--page-size', type=int, default=None, help='Transactions per page (max 500)')
    return parser


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Layer command-line flags over the environment configuration."""
    app = {}
    if args.debug:
        app['debug'] = True
        app['log_level'] = 'DEBUG'
    if args.timeout is not None:
        app['request_timeout'] = args.timeout

    query = {
        name: value
        for name, value in (
            ('start_date', args.start_date),
            ('end_date', args.end_date),
            ('transaction_id', args.transaction_id),
            ('page_index', args.page_index),
            ('page_size', args.page_size),
        )
        if value is not None
    }
    return config.with_overrides(app=app, query=query)


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = _build_parser().parse_args(argv)
    try:
        config = apply_cli_overrides(load_config(args.env_file), args)
        logging.getLogger().setLevel(config.app.log_level)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    display = ConsoleDisplay(use_colors=not args.no_color, show_enrichment=config.app.debug)
    return asyncio.run(run_check(config, display, offline=args.offline))


if __name__ == "__main__":
    sys.exit(main())
