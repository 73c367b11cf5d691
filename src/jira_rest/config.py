"""Configuration for the Jira REST client.

``ClientSettings`` is fixed at client construction and shared read-only by
every call. ``ConnectionConfig`` describes where and how to connect, loaded
from a config file and/or environment variables.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_TIMEOUT = 100
DEFAULT_CONFIG_PATH = Path.home() / ".jira-rest" / "config.json"
MIN_TIMEOUT = 1
MAX_TIMEOUT = 300

logger = logging.getLogger(__name__)


class JsonSettings(BaseModel):
    """JSON (de)serialization options."""

    model_config = ConfigDict(frozen=True)

    exclude_none: bool = Field(
        default=True, description="Drop null values from request bodies"
    )
    by_alias: bool = Field(
        default=True, description="Serialize models using their wire aliases"
    )
    trace_indent: int = Field(
        default=2, description="Indentation of request bodies in the trace log"
    )


class ClientSettings(BaseModel):
    """Settings to configure the rest client."""

    model_config = ConfigDict(frozen=True)

    proxy_url: Optional[str] = Field(
        default=None, description="HTTP proxy used for outbound calls"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    enable_request_trace: bool = Field(
        default=False,
        description="Log method, url, request body and response text",
    )
    json_options: JsonSettings = Field(
        default_factory=JsonSettings, description="JSON (de)serialization options"
    )


def normalize_url(url: str) -> str:
    """Return the url with exactly one trailing slash."""
    return url.rstrip("/") + "/"


@dataclass
class ConnectionConfig:
    """Where and how to reach Jira.

    Args:
        url: Base URL of the Jira server
        username: Username for basic authentication (optional)
        password: Password or API token for basic authentication (optional)
        proxy_url: Mediating proxy URL; when set, calls are tunneled through it
        timeout: Request timeout in seconds (1-300, default: 100)
        enable_request_trace: Log requests and responses
    """

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    proxy_url: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    enable_request_trace: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.url and not self.proxy_url:
            raise ValueError("Either url or proxy_url must be configured")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, int):
            raise ValueError(
                f"timeout must be an integer number of seconds. Got: {self.timeout!r}"
            )

        if self.timeout < MIN_TIMEOUT or self.timeout > MAX_TIMEOUT:
            raise ValueError(
                f"timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds. "
                f"Got: {self.timeout}"
            )

        if self.url:
            self.url = normalize_url(self.url)
        if self.proxy_url:
            self.proxy_url = normalize_url(self.proxy_url)

    def client_settings(self) -> ClientSettings:
        return ClientSettings(
            timeout_seconds=self.timeout,
            enable_request_trace=self.enable_request_trace,
        )


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(
    config_path: Optional[str] = None, use_env: bool = True
) -> ConnectionConfig:
    """Load connection configuration from file and/or environment variables.

    The config file is optional unless ``config_path`` is given explicitly.

    Args:
        config_path: Path to config JSON file (default: ~/.jira-rest/config.json)
        use_env: Whether environment variables override file values

    Returns:
        ConnectionConfig instance

    Raises:
        FileNotFoundError: If an explicit config file is missing
        json.JSONDecodeError: If the config file contains invalid JSON
        ValueError: If required fields are missing or invalid

    Environment Variables:
        JIRA_REST_URL, JIRA_REST_USERNAME, JIRA_REST_PASSWORD,
        JIRA_REST_PROXY_URL, JIRA_REST_TIMEOUT, JIRA_REST_TRACE
    """
    config_data: dict = {}

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    path = path.expanduser().resolve()

    if path.exists():
        file_perms = os.stat(path).st_mode & 0o777
        if file_perms != 0o600:
            logger.warning(
                f"Configuration file {path} has insecure permissions "
                f"{oct(file_perms)}. "
                f"Recommend setting to 0600: chmod 0600 {path}"
            )

        with open(path) as f:
            config_data = json.load(f)
    elif config_path is not None:
        raise FileNotFoundError(f"Config file not found: {path}")

    if use_env:
        if "JIRA_REST_URL" in os.environ:
            config_data["url"] = os.environ["JIRA_REST_URL"]
        if "JIRA_REST_USERNAME" in os.environ:
            config_data["username"] = os.environ["JIRA_REST_USERNAME"]
        if "JIRA_REST_PASSWORD" in os.environ:
            config_data["password"] = os.environ["JIRA_REST_PASSWORD"]
        if "JIRA_REST_PROXY_URL" in os.environ:
            config_data["proxy_url"] = os.environ["JIRA_REST_PROXY_URL"]
        if "JIRA_REST_TIMEOUT" in os.environ:
            config_data["timeout"] = int(os.environ["JIRA_REST_TIMEOUT"])
        if "JIRA_REST_TRACE" in os.environ:
            config_data["enable_request_trace"] = _parse_bool(
                os.environ["JIRA_REST_TRACE"]
            )

    unknown = set(config_data) - set(ConnectionConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown configuration fields: {sorted(unknown)}")

    return ConnectionConfig(**config_data)
