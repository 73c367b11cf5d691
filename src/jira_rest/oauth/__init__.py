"""OAuth 1.0a support for Jira application links."""

from .authenticator import OAuth1Authenticator, OAuthSigner, PlaintextSigner
from .settings import (
    OAuthAccessTokenSettings,
    OAuthRequestToken,
    OAuthRequestTokenSettings,
    OAuthSignatureMethod,
)
from .token_helper import (
    generate_request_token,
    generate_request_token_with_client,
    obtain_access_token,
    obtain_access_token_with_client,
)

__all__ = [
    "OAuth1Authenticator",
    "OAuthSigner",
    "PlaintextSigner",
    "OAuthAccessTokenSettings",
    "OAuthRequestToken",
    "OAuthRequestTokenSettings",
    "OAuthSignatureMethod",
    "generate_request_token",
    "generate_request_token_with_client",
    "obtain_access_token",
    "obtain_access_token_with_client",
]
