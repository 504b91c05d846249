"""Shared HTTP request handling for collectors.

Maps HTTP failures onto the collector exception hierarchy and retries the
transient ones (rate limits, 5xx, network errors) with exponential backoff.
Every collector and the Slack poster share one httpx.AsyncClient built by
the dependency container; the client's timeout bounds each call.
"""

from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.exceptions import (
    CollectorAuthError,
    CollectorError,
    CollectorNotFoundError,
    CollectorRateLimitError,
    CollectorTimeoutError,
    CollectorUnavailableError,
)

logger = structlog.get_logger(__name__)

USER_AGENT = "AIInsightsBot/1.0 (+https://github.com/ai-insights-bot)"


def build_http_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """Create the shared async HTTP client."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


def raise_for_api_status(response: httpx.Response, collector_type: str, endpoint: str) -> None:
    """Raise the collector exception matching an error response.

    Args:
        response: Response to inspect.
        collector_type: Collector name used in the error message.
        endpoint: Endpoint path or URL for context.

    Raises:
        CollectorRateLimitError: On 429.
        CollectorAuthError: On 401 / 403.
        CollectorNotFoundError: On 404.
        CollectorUnavailableError: On 5xx.
        CollectorError: On any other 4xx.
    """
    status = response.status_code
    if status < 400:
        return

    details = {"endpoint": endpoint, "status_code": status}

    if status == 429:
        logger.warning("api_rate_limited", collector=collector_type, endpoint=endpoint)
        raise CollectorRateLimitError(collector_type, "Rate limited by API", details)
    elif status in (401, 403):
        raise CollectorAuthError(collector_type, f"Not authorized (HTTP {status})", details)
    elif status == 404:
        raise CollectorNotFoundError(collector_type, f"Resource not found: {endpoint}", details)
    elif status >= 500:
        raise CollectorUnavailableError(collector_type, f"Service unavailable (HTTP {status})", details)

    logger.error(
        "api_error",
        collector=collector_type,
        status_code=status,
        endpoint=endpoint,
        body=response.text[:200],
    )
    raise CollectorError(collector_type, f"API error {status}", details)


@retry(
    retry=retry_if_exception_type((CollectorRateLimitError, CollectorUnavailableError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    collector_type: str,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> httpx.Response:
    """GET a URL, translating transport and status failures into collector errors.

    Returns:
        The successful response.

    Raises:
        CollectorTimeoutError: When the request times out.
        CollectorUnavailableError: On network failures and 5xx (after retries).
        CollectorError: On other API errors.
    """
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        logger.error("http_timeout", collector=collector_type, url=url, error=str(e))
        raise CollectorTimeoutError(collector_type, f"Request timeout: {e}", {"endpoint": url})
    except httpx.RequestError as e:
        logger.error("http_request_error", collector=collector_type, url=url, error=str(e))
        raise CollectorUnavailableError(
            collector_type,
            f"Request failed: {e}",
            {"endpoint": url, "original_error": str(e)},
        )

    raise_for_api_status(response, collector_type, url)
    return response


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    collector_type: str,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """GET a URL and decode its JSON body (empty dict for an empty body)."""
    response = await fetch(
        client, url, collector_type=collector_type, params=params, headers=headers
    )
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise CollectorError(collector_type, f"Invalid JSON response: {e}", {"endpoint": url})
