"""Error taxonomy for Jira REST calls.

The response classifier produces an ``Outcome``: either ``Success`` or a
``Failure`` tagged with an ``ErrorKind``. Failures are raised to callers as
``JiraClientError`` subclasses so they can be handled by kind without
string-matching messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, Union


class ErrorKind(str, Enum):
    """Every way a Jira REST call can fail."""

    AUTHENTICATION_FAILED = "authentication_failed"
    RESOURCE_NOT_FOUND = "resource_not_found"
    REQUEST_FAILED = "request_failed"
    MALFORMED_RESPONSE = "malformed_response"
    SERVER_REPORTED_ERROR = "server_reported_error"
    TRANSPORT_FAILURE = "transport_failure"
    LOCAL_CONTRACT_VIOLATION = "local_contract_violation"


@dataclass(frozen=True)
class Success:
    """Decoded JSON value of a successful call."""

    value: Any


@dataclass(frozen=True)
class Failure:
    """Classified failure of a call.

    Attributes:
        kind: Which failure this is
        message: Human readable description
        status_code: HTTP status of the response, when one was received
        content: Response body text, when one was received
        error_messages: ``errorMessages`` reported by the server, verbatim
        errors: ``errors`` field reported next to ``errorMessages``
    """

    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    content: Optional[str] = None
    error_messages: Any = None
    errors: Any = None


Outcome = Union[Success, Failure]


class JiraClientError(Exception):
    """Base exception for Jira REST client errors."""

    kind: ErrorKind = ErrorKind.REQUEST_FAILED

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        content: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.content = content


class AuthenticationError(JiraClientError):
    """Server rejected the credentials (HTTP 401 or 403)."""

    kind = ErrorKind.AUTHENTICATION_FAILED


class ResourceNotFoundError(JiraClientError):
    """Requested resource does not exist (HTTP 404)."""

    kind = ErrorKind.RESOURCE_NOT_FOUND


class RequestFailedError(JiraClientError):
    """Any other HTTP status of 400 or above."""

    kind = ErrorKind.REQUEST_FAILED


class MalformedResponseError(JiraClientError):
    """Response body is not valid JSON."""

    kind = ErrorKind.MALFORMED_RESPONSE


class ServerReportedError(JiraClientError):
    """Response body carries ``errorMessages`` reported by Jira."""

    kind = ErrorKind.SERVER_REPORTED_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        content: Optional[str] = None,
        error_messages: Any = None,
        errors: Any = None,
    ):
        super().__init__(message, status_code=status_code, content=content)
        self.error_messages = error_messages
        self.errors = errors


class TransportError(JiraClientError):
    """The call did not complete (network error, timeout, proxy failure)."""

    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        content: Optional[str] = None,
    ):
        super().__init__(reason, status_code=status_code, content=content)
        self.reason = reason


class LocalContractViolation(JiraClientError, ValueError):
    """Caller broke a precondition before anything was sent."""

    kind = ErrorKind.LOCAL_CONTRACT_VIOLATION


_ERROR_TYPES: Dict[ErrorKind, Type[JiraClientError]] = {
    ErrorKind.AUTHENTICATION_FAILED: AuthenticationError,
    ErrorKind.RESOURCE_NOT_FOUND: ResourceNotFoundError,
    ErrorKind.REQUEST_FAILED: RequestFailedError,
    ErrorKind.MALFORMED_RESPONSE: MalformedResponseError,
    ErrorKind.TRANSPORT_FAILURE: TransportError,
    ErrorKind.LOCAL_CONTRACT_VIOLATION: LocalContractViolation,
}


def error_from_failure(failure: Failure) -> JiraClientError:
    """Build the exception matching a classified failure."""
    if failure.kind is ErrorKind.SERVER_REPORTED_ERROR:
        return ServerReportedError(
            failure.message,
            status_code=failure.status_code,
            content=failure.content,
            error_messages=failure.error_messages,
            errors=failure.errors,
        )

    error_type = _ERROR_TYPES[failure.kind]
    return error_type(
        failure.message, status_code=failure.status_code, content=failure.content
    )


def unwrap(outcome: Outcome) -> Any:
    """Return the value of a ``Success`` or raise the matching error.

    Raises:
        JiraClientError: Subclass matching the failure kind
    """
    if isinstance(outcome, Success):
        return outcome.value
    raise error_from_failure(outcome)
