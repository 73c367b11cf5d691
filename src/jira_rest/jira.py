"""Entry point tying a REST client, its cache and the domain services."""

import logging
from typing import Optional

import httpx

from .cache import JiraCache
from .config import ClientSettings, ConnectionConfig
from .oauth.authenticator import OAuth1Authenticator, OAuthSigner
from .oauth.settings import OAuthSignatureMethod
from .remote.client import JiraRestClient
from .remote.errors import LocalContractViolation
from .remote.executors import DirectExecutor, MediatedExecutor
from .remote.models import Attachment
from .services.projects import ProjectService
from .services.versions import ProjectVersionService

logger = logging.getLogger(__name__)


class Jira:
    """Access to a Jira server.

    Use one of the ``create_*`` factories rather than the constructor.

    Args:
        client: REST client used by every service
        url: Base URL of the Jira server, used to build attachment URLs
        cache: Cache shared by the services
    """

    def __init__(
        self,
        client: JiraRestClient,
        url: Optional[str] = None,
        cache: Optional[JiraCache] = None,
    ):
        self.rest_client = client
        self.url = url
        self.cache = cache or JiraCache()
        self.projects = ProjectService(client, self.cache)
        self.versions = ProjectVersionService(client, self.cache)

    @classmethod
    def create_rest_client(
        cls,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        cookie_session: bool = False,
    ) -> "Jira":
        """Create a client talking to Jira with basic authentication.

        Args:
            url: Base URL of the Jira server
            username: Username (anonymous access when omitted)
            password: Password or API token
            settings: Client settings
            cookie_session: Rely on the session cookie and log in with basic
                auth only when the server answers 401
        """
        auth: Optional[httpx.Auth] = None
        if username is not None:
            auth = httpx.BasicAuth(username, password or "")

        if cookie_session:
            executor = DirectExecutor(url, settings, auth=None, fallback_auth=auth)
        else:
            executor = DirectExecutor(url, settings, auth=auth)
        return cls(JiraRestClient(executor), url=executor.url)

    @classmethod
    def create_oauth_rest_client(
        cls,
        url: str,
        consumer_key: str,
        consumer_secret: str,
        access_token: str,
        token_secret: str,
        signature_method: OAuthSignatureMethod = OAuthSignatureMethod.RSA_SHA1,
        signer: Optional[OAuthSigner] = None,
        settings: Optional[ClientSettings] = None,
    ) -> "Jira":
        """Create a client signing every request with an OAuth access token."""
        auth = OAuth1Authenticator.for_protected_resource(
            consumer_key,
            consumer_secret,
            access_token,
            token_secret,
            signature_method=signature_method,
            signer=signer,
        )
        executor = DirectExecutor(url, settings, auth=auth)
        return cls(JiraRestClient(executor), url=executor.url)

    @classmethod
    def create_mediated_client(
        cls,
        proxy_url: str,
        settings: Optional[ClientSettings] = None,
        jira_url: Optional[str] = None,
    ) -> "Jira":
        """Create a client tunneling every call through a forwarding proxy.

        Args:
            proxy_url: Base URL of the forwarding proxy
            settings: Client settings
            jira_url: URL of the Jira server behind the proxy, used to build
                attachment URLs; defaults to the proxy URL
        """
        executor = MediatedExecutor(proxy_url, settings)
        return cls(JiraRestClient(executor), url=jira_url or executor.url)

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> "Jira":
        """Create a client from a loaded ``ConnectionConfig``."""
        settings = config.client_settings()
        if config.proxy_url:
            return cls.create_mediated_client(
                config.proxy_url, settings, jira_url=config.url
            )
        return cls.create_rest_client(
            config.url, config.username, config.password, settings
        )

    async def download_attachment(self, attachment: Attachment) -> bytes:
        """Download the bytes of an attachment.

        Raises:
            LocalContractViolation: If this instance has no base URL
            JiraClientError: Subclass matching the classified failure
        """
        if not self.url:
            raise LocalContractViolation(
                "Unable to download attachment, the Jira url is not set"
            )
        return await self.rest_client.download_data(attachment.download_url(self.url))

    async def close(self) -> None:
        await self.rest_client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
