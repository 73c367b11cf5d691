"""Response classification shared by the direct and mediated strategies.

Decision order matters: transport completion first, then status thresholds
(401/403, then 404, then any other >= 400), then body decoding. A 404 with a
JSON body is still ``RESOURCE_NOT_FOUND``.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config import ClientSettings
from .errors import ErrorKind, Failure, Outcome, Success, error_from_failure, unwrap
from .request import JiraRequest

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("jira_rest.trace")


class ResponseStatus(str, Enum):
    """Completion status of a transport call."""

    COMPLETED = "completed"
    ERROR = "error"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class RawResponse:
    """Transport level response, owned by a strategy for a single call."""

    status_code: int
    content: str = ""
    response_status: ResponseStatus = ResponseStatus.COMPLETED
    error_message: Optional[str] = None
    raw_bytes: bytes = b""


def classify_status(response: RawResponse) -> Optional[Failure]:
    """Classify transport completion and HTTP status only.

    Returns:
        The failure, or None when the body may be consumed
    """
    content = (response.content or "").strip()

    completed = response.response_status is ResponseStatus.COMPLETED
    if response.error_message or not completed:
        reason = response.error_message or (
            f"Request could not complete: {response.response_status.value}"
        )
        return Failure(
            ErrorKind.TRANSPORT_FAILURE,
            reason,
            status_code=response.status_code or None,
        )

    status = response.status_code
    if status in (401, 403):
        return Failure(
            ErrorKind.AUTHENTICATION_FAILED,
            f"Response Content: {content}",
            status_code=status,
            content=content,
        )
    if status == 404:
        return Failure(
            ErrorKind.RESOURCE_NOT_FOUND,
            f"Response Content: {content}",
            status_code=status,
            content=content,
        )
    if status >= 400:
        return Failure(
            ErrorKind.REQUEST_FAILED,
            f"Response Status Code: {status}. Response Content: {content}",
            status_code=status,
            content=content,
        )
    return None


def classify_response(response: RawResponse) -> Outcome:
    """Classify a response and decode its JSON body."""
    failure = classify_status(response)
    if failure is not None:
        return failure

    status = response.status_code
    content = (response.content or "").strip()

    if not content:
        return Success({})

    if not content.startswith("{") and not content.startswith("["):
        return Failure(
            ErrorKind.MALFORMED_RESPONSE,
            f"Response was not recognized as JSON. Content: {content}",
            status_code=status,
            content=content,
        )

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        return Failure(
            ErrorKind.MALFORMED_RESPONSE,
            f"Failed to parse response as JSON ({e}). Content: {content}",
            status_code=status,
            content=content,
        )

    if isinstance(parsed, dict) and "errorMessages" in parsed:
        return Failure(
            ErrorKind.SERVER_REPORTED_ERROR,
            f"Response reported error(s) from JIRA: {parsed['errorMessages']}",
            status_code=status,
            content=content,
            error_messages=parsed["errorMessages"],
            errors=parsed.get("errors"),
        )

    return Success(parsed)


class ResponseValidator:
    """Validates responses and writes the optional request trace.

    Held by each execution strategy so that both produce identical error
    kinds for the same logical failure.
    """

    def __init__(self, settings: ClientSettings):
        self.settings = settings

    def trace_request(self, method: str, url: str, body: Optional[str] = None) -> None:
        if not self.settings.enable_request_trace:
            return

        trace_logger.info(f"[{method}] Request Url: {url}")
        if body is not None:
            trace_logger.info(f"[{method}] Request Data: {body}")

    def trace_response(self, method: str, url: str, content: str) -> None:
        if self.settings.enable_request_trace:
            trace_logger.info(f"[{method}] Response for Url: {url}\n{content.strip()}")

    def validate(self, request: JiraRequest, url: str, response: RawResponse) -> Any:
        """Return the decoded JSON body or raise the classified error.

        Raises:
            JiraClientError: Subclass matching the failure kind
        """
        self.trace_response(request.method.value, url, response.content or "")
        outcome = classify_response(response)
        if not isinstance(outcome, Success):
            logger.debug(
                f"{request.method.value} {url} failed: {outcome.kind.value}"
            )
        return unwrap(outcome)

    def validate_download(self, url: str, response: RawResponse) -> bytes:
        """Return the downloaded bytes or raise the classified error."""
        failure = classify_status(response)
        if failure is not None:
            self.trace_response("GET", url, response.content or "")
            logger.debug(f"GET {url} download failed: {failure.kind.value}")
            raise error_from_failure(failure)
        return response.raw_bytes
