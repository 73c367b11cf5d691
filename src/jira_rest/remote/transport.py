"""httpx transport helpers.

``send_raw`` performs exactly one HTTP call and reports network failures as a
``RawResponse`` instead of raising, so every strategy classifies transport
problems through the same path. Cancellation is never intercepted.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import ClientSettings
from .classifier import RawResponse, ResponseStatus

logger = logging.getLogger(__name__)

_DNS_ERROR_PATTERNS = [
    r"name.*resolution.*failed",
    r"name.*or.*service.*not.*known",
    r"nodename.*nor.*servname.*provided",
    r"temporary.*failure.*in.*name.*resolution",
]
_CONNECTION_ERROR_PATTERNS = [
    r"connection.*refused",
    r"connection.*reset",
    r"network.*is.*unreachable",
    r"no.*route.*to.*host",
]
_SSL_ERROR_PATTERNS = [
    r"ssl.*certificate.*verification.*failed",
    r"certificate.*verify.*failed",
    r"ssl.*handshake.*failed",
    r"bad.*certificate",
]

FileTuple = Tuple[str, Tuple[str, bytes, str]]


def build_async_client(
    settings: ClientSettings, base_url: Optional[str] = None
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` configured from client settings.

    No authenticator is attached to the client; auth is supplied per request.
    """
    timeouts = httpx.Timeout(settings.timeout_seconds, connect=10.0)
    kwargs: Dict[str, Any] = {
        "timeout": timeouts,
        "follow_redirects": True,
        "verify": settings.verify_ssl,
        "headers": {"Accept": "application/json"},
    }
    if base_url is not None:
        kwargs["base_url"] = base_url
    if settings.proxy_url:
        kwargs["proxy"] = settings.proxy_url
    return httpx.AsyncClient(**kwargs)


def describe_transport_error(error: Exception) -> str:
    """Describe an httpx exception with its failure category."""
    error_message = str(error).lower()

    if isinstance(error, httpx.TimeoutException):
        if isinstance(error, httpx.ConnectTimeout) or "connect" in error_message:
            return f"Connection timed out: {error}"
        return f"Request timed out: {error}"

    if isinstance(error, httpx.ConnectError):
        if any(re.search(p, error_message) for p in _DNS_ERROR_PATTERNS):
            return f"Cannot resolve server address: {error}"
        if any(re.search(p, error_message) for p in _SSL_ERROR_PATTERNS):
            return f"SSL certificate verification failed: {error}"
        if any(re.search(p, error_message) for p in _CONNECTION_ERROR_PATTERNS):
            return f"Cannot connect to server: {error}"
        return f"Connection failed: {error}"

    if isinstance(error, httpx.NetworkError):
        return f"Network error: {error}"

    return f"HTTP error: {error}"


async def send_raw(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    auth: Optional[httpx.Auth] = None,
    content: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    files: Optional[List[FileTuple]] = None,
    data: Optional[Dict[str, Any]] = None,
) -> RawResponse:
    """Send one request and capture the outcome as a ``RawResponse``."""
    request_headers = dict(headers or {})
    if content is not None and not files:
        request_headers.setdefault("Content-Type", "application/json")

    kwargs: Dict[str, Any] = {"headers": request_headers, "auth": auth}
    if params:
        kwargs["params"] = params
    if files:
        kwargs["files"] = files
        if data:
            kwargs["data"] = data
    elif content is not None:
        kwargs["content"] = content.encode("utf-8")

    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        reason = describe_transport_error(e)
        logger.debug(f"{method} {url} timed out: {reason}")
        return RawResponse(
            status_code=0,
            response_status=ResponseStatus.TIMED_OUT,
            error_message=reason,
        )
    except httpx.HTTPError as e:
        reason = describe_transport_error(e)
        logger.debug(f"{method} {url} failed: {reason}")
        return RawResponse(
            status_code=0,
            response_status=ResponseStatus.ERROR,
            error_message=reason,
        )

    return RawResponse(
        status_code=response.status_code,
        content=response.text,
        raw_bytes=response.content,
    )
