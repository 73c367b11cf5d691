"""Execution strategies for Jira REST calls.

``DirectExecutor`` talks to Jira itself. ``MediatedExecutor`` tunnels every
call through a forwarding proxy as an envelope POSTed to the proxy root. Both
hand responses to the same ``ResponseValidator`` so a logical failure surfaces
as the same error kind whichever strategy is active.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ..config import ClientSettings, normalize_url
from .classifier import RawResponse, ResponseValidator
from .envelopes import PROXY_PATH, decode_response, encode_request, envelope_payload
from .request import HttpMethod, JiraRequest
from .serialization import JsonSerializer
from .transport import FileTuple, build_async_client, send_raw

logger = logging.getLogger(__name__)


class RequestExecutor(ABC):
    """Interface implemented by every execution strategy.

    Owns one lazily created ``httpx.AsyncClient``; close it with ``close()`` or
    by using the executor as an async context manager.
    """

    def __init__(self, url: str, settings: Optional[ClientSettings] = None):
        self.url = normalize_url(url)
        self.settings = settings or ClientSettings()
        self.serializer = JsonSerializer(self.settings.json_options)
        self.validator = ResponseValidator(self.settings)
        self._session: Optional[httpx.AsyncClient] = None

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            self._session = build_async_client(self.settings, base_url=self.url)
        return self._session

    @abstractmethod
    async def execute(self, request: JiraRequest) -> Any:
        """Execute a request and return its decoded JSON body.

        Raises:
            JiraClientError: Subclass matching the classified failure
        """
        pass

    @abstractmethod
    async def download(self, url: str) -> bytes:
        """Download the content at ``url`` as bytes.

        Raises:
            JiraClientError: Subclass matching the classified failure
        """
        pass

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None and not self._session.is_closed:
            await self._session.aclose()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class DirectExecutor(RequestExecutor):
    """Sends requests straight to the Jira server.

    Args:
        url: Base URL of the Jira server
        settings: Client settings
        auth: Authenticator applied to every request (None relies on cookies)
        fallback_auth: Authenticator used for a single retry after a 401. It is
            passed to that one request only and never becomes client state.
    """

    def __init__(
        self,
        url: str,
        settings: Optional[ClientSettings] = None,
        auth: Optional[httpx.Auth] = None,
        fallback_auth: Optional[httpx.Auth] = None,
    ):
        super().__init__(url, settings)
        self.auth = auth
        self.fallback_auth = fallback_auth

    async def execute(self, request: JiraRequest) -> Any:
        self.validator.trace_request(
            request.method.value,
            request.resource,
            self.serializer.serialize_for_trace(request.body),
        )

        files: Optional[List[FileTuple]] = None
        data: Optional[Dict[str, Any]] = None
        content: Optional[str] = None
        if request.files:
            files = [
                (f.name, (f.file_name, f.content, f.content_type))
                for f in request.files
            ]
            if request.body is not None:
                data = self.serializer.to_jsonable(request.body)
        else:
            content = self.serializer.serialize(request.body)

        response = await self._send(
            request.method.transport_verb,
            request.resource,
            content=content,
            headers=request.headers,
            params=request.params,
            files=files,
            data=data,
        )
        return self.validator.validate(request, request.resource, response)

    async def download(self, url: str) -> bytes:
        self.validator.trace_request(HttpMethod.GET.value, url)
        response = await self._send(HttpMethod.GET.transport_verb, url)
        return self.validator.validate_download(url, response)

    async def _send(self, method: str, url: str, **kwargs) -> RawResponse:
        response = await send_raw(self.session, method, url, auth=self.auth, **kwargs)

        if response.status_code == 401 and self.fallback_auth is not None:
            logger.debug(f"Received 401 for {method} {url}, retrying with fallback")
            response = await send_raw(
                self.session, method, url, auth=self.fallback_auth, **kwargs
            )

        return response


class MediatedExecutor(RequestExecutor):
    """Tunnels every request through a forwarding proxy.

    Each logical call becomes exactly one POST of a ``RequestForwardingEnvelope``
    to the proxy root, whatever the logical method.

    Args:
        proxy_url: Base URL of the forwarding proxy
        settings: Client settings
    """

    def __init__(self, proxy_url: str, settings: Optional[ClientSettings] = None):
        super().__init__(proxy_url, settings)

    async def execute(self, request: JiraRequest) -> Any:
        envelope = encode_request(request, self.serializer)
        self.validator.trace_request(
            request.method.value,
            request.resource,
            self.serializer.serialize_for_trace(request.body),
        )

        reply = decode_response(await self._forward(envelope_payload(envelope)))
        return self.validator.validate(
            request, request.resource, reply.to_raw_response()
        )

    async def download(self, url: str) -> bytes:
        envelope = encode_request(JiraRequest(method=HttpMethod.GET, resource=url))
        self.validator.trace_request(HttpMethod.GET.value, url)

        reply = decode_response(await self._forward(envelope_payload(envelope)))
        return self.validator.validate_download(
            url, reply.to_raw_response(with_bytes=True)
        )

    async def _forward(self, payload: Dict[str, Any]) -> RawResponse:
        return await send_raw(
            self.session,
            HttpMethod.POST.transport_verb,
            PROXY_PATH,
            content=json.dumps(payload),
        )
