"""Client facade used by the domain services."""

import logging
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from ..config import ClientSettings
from .errors import MalformedResponseError
from .executors import RequestExecutor
from .request import HttpMethod, JiraRequest
from .serialization import JsonSerializer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JiraRestClient:
    """Executes Jira REST calls through an execution strategy.

    Every call goes through the same response classification whichever
    strategy is active, so callers handle failures by ``JiraClientError``
    subclass.

    Args:
        executor: Direct or mediated execution strategy
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    @property
    def url(self) -> str:
        """Base URL of the server (or the proxy, in mediated mode)."""
        return self.executor.url

    @property
    def settings(self) -> ClientSettings:
        return self.executor.settings

    @property
    def serializer(self) -> JsonSerializer:
        return self.executor.serializer

    async def execute_request(
        self,
        method: Union[str, HttpMethod],
        resource: str,
        body: Optional[Any] = None,
    ) -> Any:
        """Execute a request and return the decoded JSON value.

        Args:
            method: HTTP method
            resource: Resource path relative to the base URL
            body: Request payload (model, plain value, or raw JSON text)

        Returns:
            Decoded JSON; an empty body decodes to an empty dict

        Raises:
            LocalContractViolation: If a GET request carries a body; nothing
                is sent in that case
            JiraClientError: Subclass matching the classified failure
        """
        request = JiraRequest.create(method, resource, body)
        return await self.executor.execute(request)

    async def execute_request_as(
        self,
        response_type: Type[T],
        method: Union[str, HttpMethod],
        resource: str,
        body: Optional[Any] = None,
    ) -> T:
        """Execute a request and decode the JSON value into ``response_type``.

        Raises:
            MalformedResponseError: If the JSON does not fit ``response_type``
            JiraClientError: Subclass matching the classified failure
        """
        value = await self.execute_request(method, resource, body)
        return self._decode(response_type, value, resource)

    async def execute(self, request: JiraRequest) -> Any:
        """Execute a fully built request (headers, params, files)."""
        return await self.executor.execute(request)

    async def download_data(self, url: str) -> bytes:
        """Download the content at ``url``.

        Raises:
            JiraClientError: Subclass matching the classified failure
        """
        return await self.executor.download(url)

    def _decode(self, response_type: Type[T], value: Any, resource: str) -> T:
        try:
            return self.serializer.deserialize(response_type, value)
        except ValidationError as e:
            logger.debug(f"Response of {resource} did not match {response_type}: {e}")
            raise MalformedResponseError(
                f"Response of {resource} could not be decoded: {e}"
            ) from e

    async def close(self) -> None:
        await self.executor.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
