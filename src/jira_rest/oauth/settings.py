"""Settings and value objects of the OAuth 1.0a token exchange."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .authenticator import OAuthSigner

DEFAULT_REQUEST_TOKEN_URL = "plugins/servlet/oauth/request-token"
DEFAULT_AUTHORIZE_URL = "plugins/servlet/oauth/authorize"
DEFAULT_ACCESS_TOKEN_URL = "plugins/servlet/oauth/access-token"
DEFAULT_CALLBACK_URL = "oob"


class OAuthSignatureMethod(str, Enum):
    """Signature methods accepted by Jira application links."""

    HMAC_SHA1 = "HMAC-SHA1"
    RSA_SHA1 = "RSA-SHA1"
    PLAINTEXT = "PLAINTEXT"


@dataclass(frozen=True)
class OAuthRequestTokenSettings:
    """Settings used to generate a request token.

    Args:
        url: URL of the Jira instance
        consumer_key: Consumer key of the Jira application link
        consumer_secret: Consumer secret (the private key for RSA-SHA1)
        callback_url: Where Jira redirects after authorization
        signature_method: Signature method used to sign the request
        request_token_url: Relative URL of the request token endpoint
        authorize_url: Relative URL the user visits to authorize the token
        signer: Signature implementation; required unless PLAINTEXT
    """

    url: str
    consumer_key: str
    consumer_secret: str
    callback_url: str = DEFAULT_CALLBACK_URL
    signature_method: OAuthSignatureMethod = OAuthSignatureMethod.RSA_SHA1
    request_token_url: str = DEFAULT_REQUEST_TOKEN_URL
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    signer: Optional["OAuthSigner"] = None

    def __post_init__(self):
        object.__setattr__(self, "url", self.url.rstrip("/"))


@dataclass(frozen=True)
class OAuthRequestToken:
    """Request token returned by Jira, plus the URL the user must visit."""

    authorize_uri: str
    oauth_token: str
    oauth_token_secret: Optional[str]
    oauth_callback_confirmed: bool


@dataclass(frozen=True)
class OAuthAccessTokenSettings:
    """Settings used to exchange an authorized request token.

    Args:
        url: URL of the Jira instance
        consumer_key: Consumer key of the Jira application link
        consumer_secret: Consumer secret (the private key for RSA-SHA1)
        oauth_request_token: Request token generated by Jira
        oauth_token_secret: Request token secret generated by Jira
        signature_method: Signature method used to sign the request
        access_token_url: Relative URL of the access token endpoint
        signer: Signature implementation; required unless PLAINTEXT
        verifier: ``oauth_verifier`` handed to the callback, if any
    """

    url: str
    consumer_key: str
    consumer_secret: str
    oauth_request_token: str
    oauth_token_secret: str
    signature_method: OAuthSignatureMethod = OAuthSignatureMethod.RSA_SHA1
    access_token_url: str = DEFAULT_ACCESS_TOKEN_URL
    signer: Optional["OAuthSigner"] = None
    verifier: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "url", self.url.rstrip("/"))

    @classmethod
    def from_request_token(
        cls,
        request_token_settings: OAuthRequestTokenSettings,
        request_token: OAuthRequestToken,
        verifier: Optional[str] = None,
    ) -> "OAuthAccessTokenSettings":
        return cls(
            url=request_token_settings.url,
            consumer_key=request_token_settings.consumer_key,
            consumer_secret=request_token_settings.consumer_secret,
            oauth_request_token=request_token.oauth_token,
            oauth_token_secret=request_token.oauth_token_secret or "",
            signature_method=request_token_settings.signature_method,
            signer=request_token_settings.signer,
            verifier=verifier,
        )
