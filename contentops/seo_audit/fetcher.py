"""
Page retrieval for check_url().

One GET with browser-like headers, redirects followed. Anything other than
a 2xx final response, or a transport failure, becomes a FetchError.
"""

import logging
from typing import Optional

import httpx

from .config import AuditConfig
from .errors import FetchError

logger = logging.getLogger(__name__)


def fetch_html(
    url: str,
    config: Optional[AuditConfig] = None,
    client: Optional[httpx.Client] = None,
) -> str:
    """
    Fetch a page and return its decoded body.

    Args:
        url: Absolute http(s) URL.
        config: Headers, timeout and size limit; defaults to AuditConfig().
        client: Optional pre-built client (tests pass one with a MockTransport).

    Returns:
        The response body as text.

    Raises:
        FetchError: On transport errors, non-2xx status or oversized bodies.
    """
    config = config or AuditConfig()
    owns_client = client is None
    if owns_client:
        client = httpx.Client(
            headers=config.headers,
            timeout=config.timeout,
            follow_redirects=True,
        )

    try:
        response = client.get(url, headers=config.headers)
    except httpx.HTTPError as e:
        logger.warning(f"Fetch failed for {url}: {e}")
        raise FetchError(f"Failed to fetch URL: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not response.is_success:
        logger.warning(f"Fetch for {url} returned HTTP {response.status_code}")
        raise FetchError(
            f"Failed to fetch URL: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    if len(response.content) > config.max_bytes:
        raise FetchError(
            f"Response too large: {len(response.content)} bytes (limit {config.max_bytes})",
            status_code=response.status_code,
        )

    logger.debug(f"Fetched {url} ({response.status_code}, {len(response.content)} bytes)")
    return response.text
