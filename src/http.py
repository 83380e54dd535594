"""Shared single-shot HTTP helper for the Garanti BBVA endpoints.

Every call opens its own ``aiohttp.ClientSession`` bounded by a total timeout and
makes exactly one attempt. Network failures are translated into the error
taxonomy in ``src.errors``; HTTP status handling is left to the callers.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from .errors import RequestTimeoutError, TransportError

logger = logging.getLogger(__name__)


async def post(
    url: str,
    *,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> Tuple[int, str]:
    """
    POST once to ``url`` and return the status code with the raw body text.

    Args:
        url: Absolute endpoint URL.
        timeout: Total seconds allowed for connect, send and read.
        headers: Extra request headers.
        **kwargs: Passed to ``ClientSession.post`` (``data=`` or ``json=``).

    Raises:
        RequestTimeoutError: No complete response within ``timeout``.
        TransportError: DNS, connection or protocol failure.
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.post(url, headers=headers, **kwargs) as response:
                body = await response.text(errors='replace')
                return response.status, body
    except asyncio.TimeoutError:
        logger.error(f"Request to {url} timed out after {timeout}s")
        raise RequestTimeoutError(f"Request to {url} timed out after {timeout}s")
    except aiohttp.ClientError as e:
        logger.error(f"Request to {url} failed: {e}")
        raise TransportError(f"Request to {url} failed: {e}") from e
