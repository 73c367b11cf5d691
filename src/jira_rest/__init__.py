"""Async Jira REST client with direct and proxy-mediated execution."""

__version__ = "1.0.0"

from .cache import JiraCache
from .config import ClientSettings, ConnectionConfig, JsonSettings, load_config
from .jira import Jira

__all__ = [
    "Jira",
    "JiraCache",
    "ClientSettings",
    "ConnectionConfig",
    "JsonSettings",
    "load_config",
]
