"""GitHub REST API schemas."""

from pydantic import BaseModel


class GitHubRepo(BaseModel):
    """Repository metadata as returned by the GitHub REST API."""

    id: int
    name: str
    full_name: str
    description: str | None = None
    html_url: str
    homepage: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    language: str | None = None
    updated_at: str | None = None
    private: bool = False


class GitHubRepoSummary(BaseModel):
    """Repository listing entry for the import screen."""

    id: int
    name: str
    full_name: str
    description: str | None = None
    url: str
    homepage: str | None = None
    stars: int
    language: str | None = None
    updated_at: str | None = None
    is_private: bool
    is_imported: bool


class GitHubRepoListResponse(BaseModel):
    repos: list[GitHubRepoSummary]


class AutosyncResponse(BaseModel):
    """Project IDs refreshed and failed by one autosync run."""

    synced: list[str]
    failed: list[str]
