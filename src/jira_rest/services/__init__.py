"""Domain services reading and mutating Jira reference data."""

from .projects import ProjectService
from .versions import ProjectVersionService

__all__ = ["ProjectService", "ProjectVersionService"]
