"""OAuth 1.0a request signing as an ``httpx.Auth`` flow."""

import secrets
import time
from typing import Dict, Generator, Optional, Protocol
from urllib.parse import quote

import httpx

from .settings import DEFAULT_CALLBACK_URL, OAuthSignatureMethod


def escape(value: str) -> str:
    """Percent-encode a value per RFC 5849 section 3.6."""
    return quote(value, safe="~-._")


class OAuthSigner(Protocol):
    """Produces the ``oauth_signature`` value of a request."""

    def sign(
        self,
        method: str,
        url: str,
        params: Dict[str, str],
        consumer_secret: str,
        token_secret: Optional[str],
    ) -> str: ...


class PlaintextSigner:
    """PLAINTEXT signature: the escaped secrets joined by '&'."""

    def sign(
        self,
        method: str,
        url: str,
        params: Dict[str, str],
        consumer_secret: str,
        token_secret: Optional[str],
    ) -> str:
        return f"{escape(consumer_secret)}&{escape(token_secret or '')}"


class OAuth1Authenticator(httpx.Auth):
    """Adds an OAuth 1.0a ``Authorization`` header to each request.

    Only PLAINTEXT ships a built-in signer. HMAC-SHA1 and RSA-SHA1 need an
    ``OAuthSigner`` supplied by the caller.

    Raises:
        ValueError: If a non-PLAINTEXT method is requested without a signer
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        token: Optional[str] = None,
        token_secret: Optional[str] = None,
        callback_url: Optional[str] = None,
        verifier: Optional[str] = None,
        signature_method: OAuthSignatureMethod = OAuthSignatureMethod.PLAINTEXT,
        signer: Optional[OAuthSigner] = None,
    ):
        if signer is None:
            if signature_method is not OAuthSignatureMethod.PLAINTEXT:
                raise ValueError(
                    f"{signature_method.value} signing requires an OAuthSigner"
                )
            signer = PlaintextSigner()

        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.token = token
        self.token_secret = token_secret
        self.callback_url = callback_url
        self.verifier = verifier
        self.signature_method = signature_method
        self.signer = signer

    @classmethod
    def for_request_token(
        cls,
        consumer_key: str,
        consumer_secret: str,
        callback_url: str = DEFAULT_CALLBACK_URL,
        signature_method: OAuthSignatureMethod = OAuthSignatureMethod.PLAINTEXT,
        signer: Optional[OAuthSigner] = None,
    ) -> "OAuth1Authenticator":
        return cls(
            consumer_key,
            consumer_secret,
            callback_url=callback_url,
            signature_method=signature_method,
            signer=signer,
        )

    @classmethod
    def for_access_token(
        cls,
        consumer_key: str,
        consumer_secret: str,
        token: str,
        token_secret: str,
        signature_method: OAuthSignatureMethod = OAuthSignatureMethod.PLAINTEXT,
        signer: Optional[OAuthSigner] = None,
        verifier: Optional[str] = None,
    ) -> "OAuth1Authenticator":
        return cls(
            consumer_key,
            consumer_secret,
            token=token,
            token_secret=token_secret,
            verifier=verifier,
            signature_method=signature_method,
            signer=signer,
        )

    @classmethod
    def for_protected_resource(
        cls,
        consumer_key: str,
        consumer_secret: str,
        access_token: str,
        token_secret: str,
        signature_method: OAuthSignatureMethod = OAuthSignatureMethod.PLAINTEXT,
        signer: Optional[OAuthSigner] = None,
    ) -> "OAuth1Authenticator":
        return cls(
            consumer_key,
            consumer_secret,
            token=access_token,
            token_secret=token_secret,
            signature_method=signature_method,
            signer=signer,
        )

    def oauth_parameters(self) -> Dict[str, str]:
        params = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": secrets.token_hex(16),
            "oauth_signature_method": self.signature_method.value,
            "oauth_timestamp": str(int(time.time())),
            "oauth_version": "1.0",
        }
        if self.token:
            params["oauth_token"] = self.token
        if self.callback_url:
            params["oauth_callback"] = self.callback_url
        if self.verifier:
            params["oauth_verifier"] = self.verifier
        return params

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        params = self.oauth_parameters()

        # Query parameters take part in the signature base string
        signed = dict(request.url.params)
        signed.update(params)
        base_url = str(request.url).split("?", 1)[0]

        params["oauth_signature"] = self.signer.sign(
            request.method, base_url, signed, self.consumer_secret, self.token_secret
        )
        request.headers["Authorization"] = "OAuth " + ", ".join(
            f'{escape(k)}="{escape(v)}"' for k, v in sorted(params.items())
        )
        yield request
