"""Request execution against the Jira REST API."""

from .client import JiraRestClient
from .errors import (
    AuthenticationError,
    ErrorKind,
    JiraClientError,
    LocalContractViolation,
    MalformedResponseError,
    RequestFailedError,
    ResourceNotFoundError,
    ServerReportedError,
    TransportError,
)
from .executors import DirectExecutor, MediatedExecutor, RequestExecutor
from .request import HttpMethod, JiraRequest, RequestFile

__all__ = [
    "JiraRestClient",
    "AuthenticationError",
    "ErrorKind",
    "JiraClientError",
    "LocalContractViolation",
    "MalformedResponseError",
    "RequestFailedError",
    "ResourceNotFoundError",
    "ServerReportedError",
    "TransportError",
    "DirectExecutor",
    "MediatedExecutor",
    "RequestExecutor",
    "HttpMethod",
    "JiraRequest",
    "RequestFile",
]
