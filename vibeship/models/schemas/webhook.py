"""GitHub webhook payload schemas.

Only the fields the handlers read are modelled; everything else GitHub sends
is ignored.
"""

from pydantic import BaseModel, Field


class WebhookRepository(BaseModel):
    id: int
    name: str | None = None
    full_name: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0


class WebhookSender(BaseModel):
    login: str | None = None
    avatar_url: str | None = None


class WebhookPayload(BaseModel):
    """Fields common to every event payload."""

    action: str | None = None
    repository: WebhookRepository
    sender: WebhookSender | None = None


class CommitAuthor(BaseModel):
    name: str | None = None
    email: str | None = None


class PushCommit(BaseModel):
    id: str | None = None
    message: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    url: str | None = None
    timestamp: str | None = None


class Pusher(BaseModel):
    name: str | None = None
    email: str | None = None


class PushEventPayload(WebhookPayload):
    ref: str | None = None
    before: str | None = None
    after: str | None = None
    commits: list[PushCommit] = Field(default_factory=list)
    pusher: Pusher | None = None


class Release(BaseModel):
    id: int | None = None
    tag_name: str | None = None
    name: str | None = None
    body: str | None = None
    html_url: str | None = None
    published_at: str | None = None


class ReleaseEventPayload(WebhookPayload):
    release: Release | None = None


class StarEventPayload(WebhookPayload):
    starred_at: str | None = None


class Forkee(BaseModel):
    id: int | None = None
    full_name: str | None = None
    html_url: str | None = None


class ForkEventPayload(WebhookPayload):
    forkee: Forkee | None = None


class WebhookProjectResult(BaseModel):
    """Outcome of processing one delivery for one linked project."""

    project_id: str
    success: bool
    error: str | None = None


class WebhookResponse(BaseModel):
    message: str
    event: str | None = None
    results: list[WebhookProjectResult] = Field(default_factory=list)
