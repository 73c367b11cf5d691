"""Project lookups backed by the read-through cache."""

import logging
from typing import List

from ..cache import JiraCache
from ..remote.client import JiraRestClient
from ..remote.models import RemoteProject
from ..remote.request import HttpMethod

logger = logging.getLogger(__name__)


class ProjectService:
    """Reads projects, caching the whole collection on first fetch."""

    def __init__(self, client: JiraRestClient, cache: JiraCache):
        self.client = client
        self.cache = cache

    async def get_projects(self) -> List[RemoteProject]:
        """Return all projects, fetching them only while the cache is empty.

        Raises:
            JiraClientError: If the fetch fails; the cache is left untouched
        """
        if not self.cache.projects.any():
            logger.debug("Project cache is empty, fetching projects")
            projects = await self.client.execute_request_as(
                List[RemoteProject],
                HttpMethod.GET,
                "rest/api/2/project?expand=lead,url",
            )
            self.cache.projects.try_add(projects)

        return self.cache.projects.values()

    async def get_project(self, project_key: str) -> RemoteProject:
        """Fetch a single project. Never served from the cache."""
        return await self.client.execute_request_as(
            RemoteProject,
            HttpMethod.GET,
            f"rest/api/2/project/{project_key}?expand=lead,url",
        )
