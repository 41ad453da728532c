"""Canonical, provider-independent webhook event records.

Every decoded request produces exactly one of the hook models below.  They
form a tagged union (``Webhook``) discriminated by the ``kind`` field so
consumers can dispatch on a single attribute and round-trip the records
through JSON without guessing the shape.

All records are frozen: they are built once per request and handed to the
caller, never mutated afterwards.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Action(str, Enum):
    """What happened to the object a hook describes."""

    CREATE = "create"
    DELETE = "delete"
    CREATED = "created"
    UPDATED = "updated"
    MERGED = "merged"
    CLOSED = "closed"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Reference(_Record):
    """A branch or tag by its short name, e.g. ``main`` or ``v1.2.0``."""

    name: str
    sha: str = ""

    @field_validator("name")
    @classmethod
    def _short_name(cls, value: str) -> str:
        if value.startswith("refs/"):
            msg = f"reference name must be short, got {value!r}"
            raise ValueError(msg)
        return value


class User(_Record):
    """An account on the hosting provider."""

    login: str = ""
    name: str = ""
    email: str = ""
    avatar: str = ""


class Signature(_Record):
    """Commit author or committer identity with the commit timestamp."""

    login: str = ""
    name: str = ""
    email: str = ""
    avatar: str = ""
    date: datetime | None = None


class Commit(_Record):
    """A single commit summary.

    File lists stay empty when the provider does not include them in the
    webhook body.
    """

    sha: str
    message: str = ""
    author: Signature = Field(default_factory=Signature)
    committer: Signature = Field(default_factory=Signature)
    link: str = ""
    added: tuple[str, ...] = ()
    modified: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


class Repository(_Record):
    """Repository identity and clone locations."""

    id: str = ""
    namespace: str = ""
    name: str
    full_name: str
    branch: str = ""
    private: bool = False
    clone: str = ""
    clone_ssh: str = ""
    link: str = ""


class PullRequestBranch(_Record):
    """One side (source or target) of a pull request."""

    ref: Reference
    repo: Repository | None = None


class PullRequest(_Record):
    number: int
    title: str
    body: str = ""
    state: str = ""
    sha: str = ""
    ref: str = ""
    source: PullRequestBranch
    target: PullRequestBranch
    fork: str = ""
    link: str = ""
    closed: bool = False
    merged: bool = False
    merge_sha: str = ""
    author: User = Field(default_factory=User)
    created: datetime | None = None
    updated: datetime | None = None


class Comment(_Record):
    id: int
    body: str = ""
    author: User = Field(default_factory=User)
    link: str = ""
    created: datetime | None = None
    updated: datetime | None = None


class PushHook(_Record):
    """Commits pushed to a branch or tag.

    ``ref`` is always fully qualified (``refs/heads/...`` or ``refs/tags/...``).
    ``created`` / ``deleted`` mirror whether ``before`` / ``after`` is the
    zero-hash sentinel.
    """

    kind: Literal["push"] = "push"
    ref: str
    before: str
    after: str
    created: bool = False
    deleted: bool = False
    commit: Commit
    commits: tuple[Commit, ...] = ()
    repo: Repository
    sender: User

    @field_validator("ref")
    @classmethod
    def _full_ref(cls, value: str) -> str:
        if not value.startswith("refs/"):
            msg = f"push ref must be fully qualified, got {value!r}"
            raise ValueError(msg)
        return value


class BranchHook(_Record):
    """A branch was created or deleted."""

    kind: Literal["branch"] = "branch"
    ref: Reference
    action: Action
    repo: Repository
    sender: User


class TagHook(_Record):
    """A tag was created or deleted."""

    kind: Literal["tag"] = "tag"
    ref: Reference
    action: Action
    repo: Repository
    sender: User


class PullRequestHook(_Record):
    kind: Literal["pull_request"] = "pull_request"
    action: Action
    pull_request: PullRequest
    repo: Repository
    sender: User


class PullRequestCommentHook(_Record):
    kind: Literal["pull_request_comment"] = "pull_request_comment"
    action: Action
    pull_request: PullRequest
    comment: Comment
    repo: Repository
    sender: User


Webhook = Annotated[
    PushHook | BranchHook | TagHook | PullRequestHook | PullRequestCommentHook,
    Field(discriminator="kind"),
]

webhook_adapter: TypeAdapter[Webhook] = TypeAdapter(Webhook)


class UnhandledEvent(_Record):
    """Marker returned for event types with no canonical mapping.

    Not an error: callers acknowledge the delivery and ignore it.
    """

    event: str
