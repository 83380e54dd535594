"""Configuration management for the Garanti BBVA transactions check."""

import os
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional
from pathlib import Path
from dotenv import load_dotenv

from src.auth.token_provider import Credentials
from src.data.models import TransactionQuery

logger = logging.getLogger(__name__)

# Defaults from the Garanti BBVA developer portal (development sandbox service)
SANDBOX_BASE_URL = 'https://apis.garantibbva.com.tr:443'
TOKEN_ENDPOINT = '/auth/oauth/v2/token'
TRANSACTIONS_ENDPOINT = '/balancesandmovements/accountinformation/transaction/v1/gettransactions'

# Sample request from the API documentation
SANDBOX_QUERY = TransactionQuery(
    consent_id='3e09da8a-ae9c-50bc-b34a-c61531729dbe',
    unit_num='295',
    account_num='6291296',
    iban='TR620006200029500006291296',
    start_date='2020-12-25T12:53:07.867',
    end_date='2020-12-25T17:53:07.867',
    transaction_id='',
    page_index=1,
    page_size=100,
)


@dataclass(frozen=True)
class ApiSettings:
    """Where the two endpoints live."""
    base_url: str = SANDBOX_BASE_URL
    token_endpoint: str = TOKEN_ENDPOINT
    transactions_endpoint: str = TRANSACTIONS_ENDPOINT

    @property
    def token_url(self) -> str:
        return self.base_url.rstrip('/') + self.token_endpoint

    @property
    def transactions_url(self) -> str:
        return self.base_url.rstrip('/') + self.transactions_endpoint


@dataclass(frozen=True)
class AppSettings:
    environment: str = 'development'
    log_level: str = 'INFO'
    debug: bool = False
    request_timeout: float = 30.0


@dataclass(frozen=True)
class Config:
    """Immutable configuration handed to every component at construction."""
    credentials: Credentials
    api: ApiSettings
    app: AppSettings
    query: TransactionQuery

    def with_overrides(self, **sections: Any) -> 'Config':
        """
        Return a copy with fields of individual sections replaced.

        Example: ``config.with_overrides(app={'debug': True}, query={'page_size': 50})``
        """
        changes = {}
        for section, values in sections.items():
            if values:
                changes[section] = replace(getattr(self, section), **values)
        return replace(self, **changes)


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load configuration from environment variables and return structured config.

    Args:
        env_file: .env file to load; defaults to the one in the project root.

    Returns:
        Config with credentials, api, app and query sections.

    Raises:
        ValueError: A numeric variable does not parse or the base URL is empty.
    """
    # Load environment variables from .env file
    env_path = Path(env_file) if env_file else Path(__file__).parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded configuration from {env_path}")
    elif env_file:
        logger.warning(f"Env file {env_path} does not exist, using environment variables only")
    else:
        logger.warning("No .env file found, using environment variables only")

    config = Config(
        credentials=Credentials(
            client_id=os.getenv('OAUTH_CLIENT_ID', ''),
            client_secret=os.getenv('OAUTH_CLIENT_SECRET', ''),
            grant_type=os.getenv('OAUTH_GRANT_TYPE', 'client_credentials'),
            scope=os.getenv('OAUTH_SCOPE', 'oob'),
        ),
        api=ApiSettings(
            base_url=os.getenv('API_BASE_URL', SANDBOX_BASE_URL),
            token_endpoint=os.getenv('TOKEN_ENDPOINT', TOKEN_ENDPOINT),
            transactions_endpoint=os.getenv('API_ENDPOINT', TRANSACTIONS_ENDPOINT),
        ),
        app=AppSettings(
            environment=os.getenv('APP_ENV', 'development'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            debug=os.getenv('ENABLE_DEBUG_LOGS', 'False').lower() == 'true',
            request_timeout=_env_number('REQUEST_TIMEOUT', 30.0, float),
        ),
        query=TransactionQuery(
            consent_id=os.getenv('TEST_CONSENT_ID', SANDBOX_QUERY.consent_id),
            unit_num=os.getenv('TEST_UNIT_NUM', SANDBOX_QUERY.unit_num),
            account_num=os.getenv('TEST_ACCOUNT_NUM', SANDBOX_QUERY.account_num),
            iban=os.getenv('TEST_IBAN', SANDBOX_QUERY.iban),
            start_date=os.getenv('TEST_START_DATE', SANDBOX_QUERY.start_date),
            end_date=os.getenv('TEST_END_DATE', SANDBOX_QUERY.end_date),
            transaction_id=os.getenv('TEST_TRANSACTION_ID', SANDBOX_QUERY.transaction_id),
            page_index=_env_number('TEST_PAGE_INDEX', SANDBOX_QUERY.page_index, int),
            page_size=_env_number('TEST_PAGE_SIZE', SANDBOX_QUERY.page_size, int),
        ),
    )

    # Validate configuration and log warnings for missing optional values
    _validate_config(config)

    return config


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _validate_config(config: Config) -> None:
    """
    Validate that required configuration values are present.

    Args:
        config: Configuration to validate.

    Raises:
        ValueError: If required configuration is missing.
    """
    if not config.credentials.client_id or not config.credentials.client_secret:
        logger.warning("OAUTH_CLIENT_ID/SECRET not set. The token request will fail unless running --offline.")
    if not config.api.base_url:
        raise ValueError("API_BASE_URL missing; cannot proceed.")
    if config.app.request_timeout <= 0:
        raise ValueError("REQUEST_TIMEOUT must be positive")
    logger.info("Configuration validation completed")


def mask(value: Optional[str], show: int = 8) -> str:
    """Show only the first ``show`` characters of a secret."""
    if not value:
        return 'None'
    if len(value) <= show:
        return '*' * len(value)
    return value[:show] + '...'


def describe_config(config: Config) -> Dict[str, Any]:
    """Loggable summary of the configuration with secrets masked."""
    return {
        'environment': config.app.environment,
        'client_id': config.credentials.client_id,
        'client_secret': mask(config.credentials.client_secret),
        'scope': config.credentials.scope,
        'api_base_url': config.api.base_url,
        'request_timeout': config.app.request_timeout,
        'debug_logs': config.app.debug,
    }


def log_config(config: Config) -> None:
    """Log the loaded configuration (debug mode only)."""
    if not config.app.debug:
        return
    logger.info("Configuration loaded:")
    for key, value in describe_config(config).items():
        logger.info(f"   {key}: {value}")
