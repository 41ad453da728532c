"""Pydantic models for Bitbucket Cloud webhook payloads.

Only the fields the decoder projects are declared; everything else in the body
is ignored so new provider fields never break decoding.

Reference: https://support.atlassian.com/bitbucket-cloud/docs/event-payloads/
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Link(BaseModel):
    href: str = ""


class Links(BaseModel):
    html: Link = Field(default_factory=Link)
    avatar: Link = Field(default_factory=Link)


class Account(BaseModel):
    """A user or team account (``actor``, ``author``, ``user`` blocks)."""

    uuid: str = ""
    username: str = ""
    nickname: str = ""
    display_name: str = ""
    links: Links = Field(default_factory=Links)

    @property
    def login(self) -> str:
        return self.username or self.nickname


class CommitAuthor(BaseModel):
    """Commit author: the raw ``Name <email>`` string plus the linked account."""

    raw: str = ""
    user: Account | None = None


class Target(BaseModel):
    """A commit as embedded in push changes."""

    hash: str = Field(min_length=1)
    message: str = ""
    date: datetime | None = None
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    links: Links = Field(default_factory=Links)


class RefState(BaseModel):
    """State of a reference before (``old``) or after (``new``) a push."""

    type: str
    name: str
    target: Target


class Change(BaseModel):
    new: RefState | None = None
    old: RefState | None = None
    commits: list[Target] = Field(default_factory=list)


class Push(BaseModel):
    changes: list[Change]


class Repository(BaseModel):
    uuid: str = ""
    name: str = ""
    full_name: str
    is_private: bool = False
    links: Links = Field(default_factory=Links)


class PushPayload(BaseModel):
    """``repo:push`` event payload."""

    push: Push
    repository: Repository
    actor: Account


class BranchName(BaseModel):
    name: str


class CommitHash(BaseModel):
    hash: str


class Endpoint(BaseModel):
    """Source or destination of a pull request."""

    branch: BranchName
    commit: CommitHash | None = None
    repository: Repository | None = None


class PullRequest(BaseModel):
    id: int
    title: str
    description: str = ""
    state: str = ""
    author: Account = Field(default_factory=Account)
    source: Endpoint
    destination: Endpoint
    merge_commit: CommitHash | None = None
    links: Links = Field(default_factory=Links)
    created_on: datetime | None = None
    updated_on: datetime | None = None


class PullRequestPayload(BaseModel):
    """``pullrequest:*`` event payload."""

    pullrequest: PullRequest
    repository: Repository
    actor: Account


class CommentContent(BaseModel):
    raw: str = ""


class Comment(BaseModel):
    id: int
    content: CommentContent = Field(default_factory=CommentContent)
    user: Account = Field(default_factory=Account)
    links: Links = Field(default_factory=Links)
    created_on: datetime | None = None
    updated_on: datetime | None = None


class PullRequestCommentPayload(PullRequestPayload):
    """``pullrequest:comment_created`` event payload."""

    comment: Comment
