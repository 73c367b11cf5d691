"""Three-legged OAuth token exchange against Jira.

Both steps return None when the server does not hand out a token: that is a
normal outcome the caller checks, not an error. Only a transport failure
raises.
"""

import logging
import secrets
from typing import Dict, List, Optional
from urllib.parse import parse_qs

import httpx

from ..config import ClientSettings
from ..remote.classifier import RawResponse, ResponseStatus
from ..remote.errors import TransportError
from ..remote.transport import build_async_client, send_raw
from .authenticator import OAuth1Authenticator
from .settings import (
    OAuthAccessTokenSettings,
    OAuthRequestToken,
    OAuthRequestTokenSettings,
)

logger = logging.getLogger(__name__)


def _join(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _first(query: Dict[str, List[str]], name: str) -> Optional[str]:
    values = query.get(name)
    return values[0] if values else None


async def _post(
    client: httpx.AsyncClient, url: str, auth: httpx.Auth
) -> Optional[Dict[str, List[str]]]:
    """POST to a token endpoint and parse the URL-encoded reply.

    Returns:
        Parsed reply, or None on a non-200 status

    Raises:
        TransportError: If the call did not complete
    """
    response: RawResponse = await send_raw(client, "POST", url, auth=auth)

    if response.response_status is not ResponseStatus.COMPLETED:
        raise TransportError(
            response.error_message or "OAuth token request could not complete"
        )

    if response.status_code != 200:
        logger.debug(f"Token endpoint {url} answered {response.status_code}")
        return None

    return parse_qs(response.content.strip(), keep_blank_values=True)


async def generate_request_token_with_client(
    client: httpx.AsyncClient,
    base_url: str,
    request_token_url: str,
    authorize_url: str,
    auth: httpx.Auth,
) -> Optional[OAuthRequestToken]:
    """Generate a request token using an existing HTTP client.

    Args:
        client: HTTP client used for the call
        base_url: URL of the Jira instance
        request_token_url: Relative URL of the request token endpoint
        authorize_url: Relative URL of the authorization page
        auth: Request-token scoped authenticator

    Returns:
        The request token, or None when Jira did not issue one
    """
    query = await _post(client, _join(base_url, request_token_url), auth)
    if query is None:
        return None

    token = _first(query, "oauth_token")
    if not token:
        logger.warning("Request token reply did not contain an oauth_token")
        return None

    confirmed = (_first(query, "oauth_callback_confirmed") or "").lower() == "true"
    return OAuthRequestToken(
        authorize_uri=f"{_join(base_url, authorize_url)}?oauth_token={token}",
        oauth_token=token,
        oauth_token_secret=_first(query, "oauth_token_secret"),
        oauth_callback_confirmed=confirmed,
    )


async def generate_request_token(
    settings: OAuthRequestTokenSettings,
    client_settings: Optional[ClientSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[OAuthRequestToken]:
    """Generate a request token for the OAuth authentication process.

    Args:
        settings: Request token settings
        client_settings: Proxy, timeout and TLS settings for a new HTTP client
        client: Existing HTTP client; takes precedence over client_settings

    Returns:
        The request token, or None when Jira did not issue one

    Raises:
        TransportError: If the call did not complete
    """
    auth = OAuth1Authenticator.for_request_token(
        settings.consumer_key,
        settings.consumer_secret,
        callback_url=settings.callback_url,
        signature_method=settings.signature_method,
        signer=settings.signer,
    )

    if client is not None:
        return await generate_request_token_with_client(
            client,
            settings.url,
            settings.request_token_url,
            settings.authorize_url,
            auth,
        )

    async with build_async_client(client_settings or ClientSettings()) as owned:
        return await generate_request_token_with_client(
            owned,
            settings.url,
            settings.request_token_url,
            settings.authorize_url,
            auth,
        )


async def obtain_access_token_with_client(
    client: httpx.AsyncClient,
    base_url: str,
    access_token_url: str,
    oauth_token_secret: str,
    auth: httpx.Auth,
) -> Optional[str]:
    """Obtain an access token using an existing HTTP client.

    Returns:
        The access token, or None on a non-200 reply or when the returned
        token secret differs from ``oauth_token_secret``
    """
    query = await _post(client, _join(base_url, access_token_url), auth)
    if query is None:
        return None

    returned_secret = _first(query, "oauth_token_secret") or ""
    if not secrets.compare_digest(
        returned_secret.encode("utf-8"), oauth_token_secret.encode("utf-8")
    ):
        logger.debug("Access token reply carried a different token secret")
        return None

    return _first(query, "oauth_token")


async def obtain_access_token(
    settings: OAuthAccessTokenSettings,
    client_settings: Optional[ClientSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """Exchange an authorized request token for an access token.

    Args:
        settings: Access token settings
        client_settings: Proxy, timeout and TLS settings for a new HTTP client
        client: Existing HTTP client; takes precedence over client_settings

    Returns:
        The access token, or None when the exchange did not complete

    Raises:
        TransportError: If the call did not complete
    """
    auth = OAuth1Authenticator.for_access_token(
        settings.consumer_key,
        settings.consumer_secret,
        settings.oauth_request_token,
        settings.oauth_token_secret,
        signature_method=settings.signature_method,
        signer=settings.signer,
        verifier=settings.verifier,
    )

    if client is not None:
        return await obtain_access_token_with_client(
            client,
            settings.url,
            settings.access_token_url,
            settings.oauth_token_secret,
            auth,
        )

    async with build_async_client(client_settings or ClientSettings()) as owned:
        return await obtain_access_token_with_client(
            owned,
            settings.url,
            settings.access_token_url,
            settings.oauth_token_secret,
            auth,
        )
