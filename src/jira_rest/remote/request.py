"""Request value objects shared by every execution strategy."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import LocalContractViolation

FORM_FIELD_TYPES = (str, bytes, int, float)


class HttpMethod(str, Enum):
    """Logical HTTP methods understood by the Jira REST client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    SEARCH = "SEARCH"

    @property
    def transport_verb(self) -> str:
        """Verb put on the wire. SEARCH travels as TRACE."""
        if self is HttpMethod.SEARCH:
            return "TRACE"
        return self.value

    @classmethod
    def parse(cls, value: Union[str, "HttpMethod"]) -> "HttpMethod":
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(value.upper())
        except ValueError:
            raise LocalContractViolation(f"Unsupported HTTP method: {value}")


@dataclass(frozen=True)
class RequestFile:
    """File attached to a multipart request."""

    name: str
    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class JiraRequest:
    """One logical call against the Jira REST API.

    Args:
        method: Logical HTTP method
        resource: Path relative to the server URL (may carry a query string)
        body: JSON serializable payload, or a raw JSON string sent verbatim
        files: Multipart attachments
        headers: Extra request headers
        params: Extra query string parameters

    Raises:
        LocalContractViolation: If a GET request carries a body, or a multipart
            request carries a body that is not a mapping of plain form values
    """

    method: HttpMethod
    resource: str
    body: Any = None
    files: List[RequestFile] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method", HttpMethod.parse(self.method))
        if self.method is HttpMethod.GET and self.body is not None:
            raise LocalContractViolation(
                f"GET requests are not allowed to have a request body. "
                f"Resource: {self.resource}. Body: {self.body}"
            )
        if self.files and self.body is not None and not isinstance(self.body, dict):
            raise LocalContractViolation(
                "Multipart requests only accept a mapping of form fields as body. "
                f"Resource: {self.resource}"
            )
        if self.files and isinstance(self.body, dict):
            invalid = sorted(
                str(name)
                for name, value in self.body.items()
                if not isinstance(value, FORM_FIELD_TYPES)
            )
            if invalid:
                raise LocalContractViolation(
                    f"Multipart form fields must be plain values. "
                    f"Resource: {self.resource}. Fields: {', '.join(invalid)}"
                )

    @classmethod
    def create(
        cls,
        method: Union[str, "HttpMethod"],
        resource: str,
        body: Optional[Any] = None,
    ) -> "JiraRequest":
        return cls(method=HttpMethod.parse(method), resource=resource, body=body)
