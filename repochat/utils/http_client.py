"""
Standardized HTTP Client Utilities

Provides a consistent interface for making HTTP requests across RepoChat.
Uses `requests` for synchronous calls with standardized error handling.

Usage:
    from repochat.utils.http_client import http_json_get

    data = http_json_get("https://api.github.com/repos/o/r", timeout=5)
"""

from typing import Any, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from repochat.configs.constants import get_timeout
from repochat.exceptions import HTTPConnectionError, HTTPRequestError, HTTPTimeoutError

# Default timeout for HTTP requests (seconds)
DEFAULT_TIMEOUT = get_timeout("http_default", 10)


def http_get(
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    raise_for_status: bool = True,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """
    Make a GET request with standardized error handling.

    Args:
        url: Request URL
        headers: Optional headers dict
        params: Optional query parameters
        timeout: Request timeout in seconds
        raise_for_status: Raise HTTPRequestError on 4xx/5xx responses
        session: Optional session to reuse connections

    Returns:
        requests.Response object

    Raises:
        HTTPConnectionError: Connection failed
        HTTPTimeoutError: Request timed out
        HTTPRequestError: Bad status code (if raise_for_status=True)
    """
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, headers=headers, params=params, timeout=timeout)
        if raise_for_status:
            response.raise_for_status()
        return response
    except requests.exceptions.ConnectionError as e:
        raise HTTPConnectionError(f"Connection failed: {url}") from e
    except requests.exceptions.Timeout as e:
        raise HTTPTimeoutError(f"Request timed out: {url}") from e
    except requests.exceptions.HTTPError as e:
        raise HTTPRequestError(
            f"HTTP {e.response.status_code}: {url}",
            status_code=e.response.status_code,
            response_text=e.response.text[:500] if e.response.text else None,
        ) from e


@retry(
    retry=retry_if_exception_type((HTTPConnectionError, HTTPTimeoutError)),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    stop=stop_after_attempt(3),
    reraise=True,
)
def http_json_get(
    url: str,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """
    GET request that returns parsed JSON.

    Connection failures and timeouts are retried with exponential backoff;
    HTTP status errors are not.

    Raises:
        HTTPConnectionError: Connection failed after retries
        HTTPTimeoutError: Request timed out after retries
        HTTPRequestError: Bad status code or invalid JSON
    """
    response = http_get(url, headers=headers, params=params, timeout=timeout, session=session)
    try:
        return response.json()
    except ValueError as e:
        raise HTTPRequestError(f"Invalid JSON response from {url}") from e
