"""Reference data returned by the Jira REST API."""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class _JiraModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JiraUserRef(_JiraModel):
    """User reference embedded in other resources."""

    key: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    account_id: Optional[str] = Field(default=None, alias="accountId")


class RemoteProject(_JiraModel):
    """A Jira project."""

    id: str
    key: str
    name: Optional[str] = None
    description: Optional[str] = None
    lead: Optional[JiraUserRef] = None
    url: Optional[str] = None
    project_type_key: Optional[str] = Field(default=None, alias="projectTypeKey")
    self_link: Optional[str] = Field(default=None, alias="self")


class ProjectVersion(_JiraModel):
    """A version of a Jira project.

    ``project_key`` is filled in by the client from the project the version
    was fetched for; it is never sent to the server.
    """

    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    archived: bool = False
    released: bool = False
    overdue: Optional[bool] = None
    release_date: Optional[str] = Field(default=None, alias="releaseDate")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    project_id: Optional[int] = Field(default=None, alias="projectId")
    self_link: Optional[str] = Field(default=None, alias="self")
    project_key: Optional[str] = Field(default=None, exclude=True)


class ProjectVersionCreationInfo(_JiraModel):
    """Payload of a version creation request."""

    name: str
    project_key: str = Field(alias="project")
    description: Optional[str] = None
    archived: bool = False
    released: bool = False
    release_date: Optional[str] = Field(default=None, alias="releaseDate")
    start_date: Optional[str] = Field(default=None, alias="startDate")


class PagedQueryResult(_JiraModel, Generic[T]):
    """One page of a paged collection."""

    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
    is_last: Optional[bool] = Field(default=None, alias="isLast")
    values: List[T] = Field(default_factory=list)


class Attachment(_JiraModel):
    """Metadata of an issue attachment."""

    id: str
    filename: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    size: Optional[int] = None
    created: Optional[str] = None
    author: Optional[Any] = None

    def download_url(self, base_url: str) -> str:
        """URL the attachment bytes are served from."""
        return f"{base_url.rstrip('/')}/secure/attachment/{self.id}/{self.filename}"
