"""Forwarding envelopes for mediated execution.

A ``RequestForwardingEnvelope`` describes one logical HTTP call. It is always
POSTed to the proxy root; the logical method travels inside the envelope. The
proxy answers with a ``ResponseForwardingEnvelope`` whose ``statusCode`` and
``jsonBody`` are the result of the tunneled call.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .classifier import RawResponse, ResponseStatus
from .errors import TransportError
from .request import JiraRequest, RequestFile
from .serialization import JsonSerializer

logger = logging.getLogger(__name__)

PROXY_PATH = "/"


class _Envelope(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FileEnvelope(_Envelope):
    """Multipart file carried inside a request envelope."""

    name: str
    file_name: str = Field(alias="fileName")
    content_type: str = Field(alias="contentType")
    content: str = Field(description="Base64 encoded file content")

    @classmethod
    def from_file(cls, file: RequestFile) -> "FileEnvelope":
        return cls(
            name=file.name,
            file_name=file.file_name,
            content_type=file.content_type,
            content=base64.b64encode(file.content).decode("ascii"),
        )


class ParameterEnvelope(_Envelope):
    """Header or query string parameter carried inside a request envelope."""

    name: str
    value: str
    type: str = Field(description="'QueryString' or 'HttpHeader'")


class RequestForwardingEnvelope(_Envelope):
    """One logical call tunneled to the proxy."""

    method: str
    resource: str
    body: Optional[str] = None
    files: Optional[List[FileEnvelope]] = None
    parameters: Optional[List[ParameterEnvelope]] = None


class ResponseForwardingEnvelope(_Envelope):
    """The proxy's verdict on a tunneled call."""

    request_successful: bool = Field(alias="requestSuccessful")
    status_code: int = Field(default=0, alias="statusCode")
    json_body: Optional[str] = Field(default=None, alias="jsonBody")
    raw_content: Optional[str] = Field(
        default=None, alias="rawContent", description="Base64 encoded bytes"
    )
    error_message: Optional[str] = Field(default=None, alias="errorMessage")

    @field_validator("raw_content")
    @classmethod
    def raw_content_is_base64(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                base64.b64decode(value, validate=True)
            except binascii.Error as e:
                raise ValueError(f"rawContent is not valid base64: {e}") from e
        return value

    def to_raw_response(self, with_bytes: bool = False) -> RawResponse:
        """Logical response of the tunneled call.

        Args:
            with_bytes: Decode ``rawContent`` into ``raw_bytes`` (downloads only)
        """
        return RawResponse(
            status_code=self.status_code,
            content=self.json_body or "",
            raw_bytes=self.content_bytes() if with_bytes else b"",
        )

    def content_bytes(self) -> bytes:
        if not self.raw_content:
            return b""
        return base64.b64decode(self.raw_content, validate=True)


def _parameters(request: JiraRequest) -> Optional[List[ParameterEnvelope]]:
    parameters = [
        ParameterEnvelope(name=name, value=value, type="QueryString")
        for name, value in request.params.items()
    ]
    parameters.extend(
        ParameterEnvelope(name=name, value=value, type="HttpHeader")
        for name, value in request.headers.items()
    )
    return parameters or None


def encode_request(
    request: JiraRequest, serializer: Optional[JsonSerializer] = None
) -> RequestForwardingEnvelope:
    """Wrap a logical request into an envelope.

    The body is serialized to JSON text; a string body is already JSON text
    and is carried verbatim.
    """
    serializer = serializer or JsonSerializer()
    body = serializer.serialize(request.body)
    files = [FileEnvelope.from_file(f) for f in request.files] or None

    return RequestForwardingEnvelope(
        method=request.method.transport_verb,
        resource=request.resource,
        body=body,
        files=files,
        parameters=_parameters(request),
    )


def envelope_payload(envelope: RequestForwardingEnvelope) -> Dict[str, Any]:
    """JSON document POSTed to the proxy."""
    return envelope.model_dump(mode="json", by_alias=True)


def decode_response(response: RawResponse) -> ResponseForwardingEnvelope:
    """Parse the proxy's reply.

    Raises:
        TransportError: If the proxy call did not complete, the reply is not an
            envelope, or the envelope reports an unsuccessful request
    """
    completed = response.response_status is ResponseStatus.COMPLETED
    if response.error_message or not completed:
        reason = response.error_message or (
            f"Request could not complete: {response.response_status.value}"
        )
        raise TransportError(reason)

    content = (response.content or "").strip()
    incomplete = (
        f"Mediated request could not complete. Proxy status: {response.status_code}"
    )
    if not content:
        raise TransportError(
            incomplete, status_code=response.status_code, content=content
        )

    try:
        envelope = ResponseForwardingEnvelope.model_validate_json(content)
    except ValidationError as e:
        logger.debug(f"Proxy reply is not a forwarding envelope: {e}")
        raise TransportError(
            incomplete, status_code=response.status_code, content=content
        ) from e

    if not envelope.request_successful:
        reason = envelope.error_message or "Mediated request could not complete."
        raise TransportError(reason, status_code=envelope.status_code or None)

    return envelope
