"""Project version operations backed by the read-through cache."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from ..cache import JiraCache
from ..remote.client import JiraRestClient
from ..remote.errors import LocalContractViolation
from ..remote.models import (
    PagedQueryResult,
    ProjectVersion,
    ProjectVersionCreationInfo,
)
from ..remote.request import HttpMethod

logger = logging.getLogger(__name__)


class ProjectVersionService:
    """Reads and mutates project versions.

    Reads are served from the cache once any version of the project is
    cached. Create and update clear the version cache since their effect on
    other cached entries is unknown; delete removes only the deleted entry.
    The cache is written only after the remote call succeeded.
    """

    def __init__(self, client: JiraRestClient, cache: JiraCache):
        self.client = client
        self.cache = cache

    def _belongs_to(self, project_key: str):
        return lambda version: version.project_key == project_key

    async def get_versions(self, project_key: str) -> List[ProjectVersion]:
        """Return the versions of a project.

        Raises:
            JiraClientError: If the fetch fails; the cache is left untouched
        """
        belongs = self._belongs_to(project_key)
        if self.cache.versions.any(belongs):
            return self.cache.versions.select(belongs)

        logger.debug(f"No cached versions for {project_key}, fetching versions")
        versions = await self.client.execute_request_as(
            List[ProjectVersion],
            HttpMethod.GET,
            f"rest/api/2/project/{project_key}/versions",
        )
        versions = [v.model_copy(update={"project_key": project_key}) for v in versions]
        self.cache.versions.try_add(versions)
        return versions

    async def get_paged_versions(
        self, project_key: str, start_at: int = 0, max_results: int = 50
    ) -> PagedQueryResult[ProjectVersion]:
        """Fetch one page of a project's versions. Not cached."""
        resource = (
            f"rest/api/2/project/{project_key}/version"
            f"?startAt={start_at}&maxResults={max_results}"
        )
        page = await self.client.execute_request_as(
            PagedQueryResult[ProjectVersion], HttpMethod.GET, resource
        )
        page.values = [
            v.model_copy(update={"project_key": project_key}) for v in page.values
        ]
        return page

    async def create_version(self, info: ProjectVersionCreationInfo) -> ProjectVersion:
        version = await self.client.execute_request_as(
            ProjectVersion, HttpMethod.POST, "/rest/api/2/version", info
        )
        self.cache.versions.clear()
        return version.model_copy(update={"project_key": info.project_key})

    async def update_version(self, version: ProjectVersion) -> ProjectVersion:
        """Send the version's fields to the server and return the stored result.

        Raises:
            LocalContractViolation: If the version has no id
        """
        if not version.id:
            raise LocalContractViolation("Cannot update a version without an id")

        updated = await self.client.execute_request_as(
            ProjectVersion,
            HttpMethod.PUT,
            f"rest/api/2/version/{version.id}",
            version,
        )
        self.cache.versions.clear()
        return updated.model_copy(update={"project_key": version.project_key})

    async def delete_version(
        self,
        version_id: str,
        move_fix_issues_to: Optional[str] = None,
        move_affected_issues_to: Optional[str] = None,
    ) -> None:
        """Delete a version, optionally moving its issues to other versions."""
        query: Dict[str, Any] = {}
        if move_fix_issues_to:
            query["moveFixIssuesTo"] = move_fix_issues_to
        if move_affected_issues_to:
            query["moveAffectedIssuesTo"] = move_affected_issues_to

        resource = f"/rest/api/2/version/{version_id}"
        if query:
            resource = f"{resource}?{urlencode(query, quote_via=quote)}"

        await self.client.execute_request(HttpMethod.DELETE, resource)
        self.cache.versions.try_remove(version_id)

    async def get_version(self, version_id: str) -> ProjectVersion:
        """Fetch a single version. Never served from the cache."""
        return await self.client.execute_request_as(
            ProjectVersion, HttpMethod.GET, f"rest/api/2/version/{version_id}"
        )
