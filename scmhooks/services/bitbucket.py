"""Bitbucket Cloud payload decoder.

Decodes a raw webhook body into the provider-shaped models in
``scmhooks.schemas.bitbucket`` and projects them onto the canonical records
in ``scmhooks.schemas.events``.

Bitbucket sends every reference update as ``repo:push``: branch and tag
creation, deletion and ordinary pushes all arrive on the same event key.
The reference type recorded in the change (``branch`` or ``tag``) decides
the ``refs/heads/`` vs ``refs/tags/`` prefix, and a missing ``old`` / ``new``
state is replaced by the zero-hash sentinel.  Commit content is never used
to tell branches and tags apart.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from scmhooks.errors import MalformedPayloadError
from scmhooks.schemas import bitbucket
from scmhooks.schemas.events import (
    Action,
    BranchHook,
    Comment,
    Commit,
    PullRequest,
    PullRequestBranch,
    PullRequestCommentHook,
    PullRequestHook,
    PushHook,
    Reference,
    Repository,
    Signature,
    TagHook,
    User,
    Webhook,
)
from scmhooks.services.classifier import EventKind
from scmhooks.services.refs import REF_PREFIX, ZERO_SHA, is_zero_sha, qualify_ref

logger = structlog.get_logger()

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_EMAIL_RE = re.compile(r"<([^>]+)>")

# Pull request actions come from the event key alone, never the payload state.
PULL_REQUEST_ACTIONS: Mapping[EventKind, Action] = MappingProxyType(
    {
        EventKind.PULL_REQUEST_CREATED: Action.CREATED,
        EventKind.PULL_REQUEST_UPDATED: Action.UPDATED,
        EventKind.PULL_REQUEST_FULFILLED: Action.MERGED,
        EventKind.PULL_REQUEST_REJECTED: Action.CLOSED,
    }
)


def decode(kind: EventKind, body: bytes, *, split_tag_create: bool = False) -> Webhook:
    """Decode a raw body for the given event kind into a canonical hook.

    Args:
        kind: Event kind returned by ``classify``.
        body: Raw request body.
        split_tag_create: Report tag creation as a ``TagHook`` instead of a
            ``PushHook`` with ``created=True``.

    Raises:
        MalformedPayloadError: If the body is not valid JSON, lacks a
            required field, or cannot be expressed as a canonical record.
    """
    try:
        if kind is EventKind.PUSH:
            payload = load(bitbucket.PushPayload, body)
            return convert_push(payload, split_tag_create=split_tag_create)
        if kind is EventKind.PULL_REQUEST_COMMENT_CREATED:
            return convert_pull_request_comment(load(bitbucket.PullRequestCommentPayload, body))
        payload = load(bitbucket.PullRequestPayload, body)
        return convert_pull_request(payload, PULL_REQUEST_ACTIONS[kind])
    except ValidationError as exc:
        # A canonical record refused a value the payload models accepted
        raise _malformed(kind.value, exc) from exc


def load(model: type[PayloadT], body: bytes) -> PayloadT:
    """Validate a JSON body against a payload model.

    The first validation error is reported with its dotted field path.
    """
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise _malformed(model.__name__, exc) from exc


def _malformed(source: str, exc: ValidationError) -> MalformedPayloadError:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or None
    logger.debug("payload_validation_failed", source=source, errors=exc.error_count())
    return MalformedPayloadError(f"{source}: {error['msg']}", field=field)


def short_name(name: str, field: str) -> str:
    """Return a provider branch or tag name for use in a ``Reference``.

    Names that themselves start with ``refs/`` cannot be told apart from a
    fully qualified reference, so they are refused.

    Raises:
        MalformedPayloadError: If ``name`` starts with ``refs/``.
    """
    if name.startswith(REF_PREFIX):
        msg = f"reference name {name!r} is not a short name"
        raise MalformedPayloadError(msg, field=field)
    return name


def convert_push(payload: bitbucket.PushPayload, *, split_tag_create: bool = False) -> Webhook:
    """Project a ``repo:push`` payload onto a push, branch or tag hook.

    Only the first change is considered; Bitbucket sends one change per
    reference update.
    """
    if not payload.push.changes:
        raise MalformedPayloadError("push has an empty changeset", field="push.changes")
    change = payload.push.changes[0]
    state = change.new or change.old
    if state is None:
        raise MalformedPayloadError(
            "push change has neither a new nor an old reference",
            field="push.changes.0",
        )

    tag = state.type == "tag"
    ref = qualify_ref(state.name, tag=tag)
    before = change.old.target.hash if change.old else ZERO_SHA
    after = change.new.target.hash if change.new else ZERO_SHA
    repo = convert_repository(payload.repository, branch=state.name)
    sender = convert_user(payload.actor)

    if is_zero_sha(after):
        field = "push.changes.0.old.name"
        reference = Reference(name=short_name(state.name, field), sha=before)
        return _convert_reference_hook(reference, Action.DELETE, repo, sender, tag=tag)
    if is_zero_sha(before) and split_tag_create and tag:
        field = "push.changes.0.new.name"
        reference = Reference(name=short_name(state.name, field), sha=after)
        return _convert_reference_hook(reference, Action.CREATE, repo, sender, tag=tag)

    return PushHook(
        ref=ref,
        before=before,
        after=after,
        created=is_zero_sha(before),
        deleted=is_zero_sha(after),
        commit=convert_commit(state.target),
        commits=tuple(convert_commit(target) for target in change.commits),
        repo=repo,
        sender=sender,
    )


def _convert_reference_hook(
    reference: Reference,
    action: Action,
    repo: Repository,
    sender: User,
    *,
    tag: bool,
) -> BranchHook | TagHook:
    if tag:
        return TagHook(ref=reference, action=action, repo=repo, sender=sender)
    return BranchHook(ref=reference, action=action, repo=repo, sender=sender)


def convert_pull_request(payload: bitbucket.PullRequestPayload, action: Action) -> PullRequestHook:
    pull_request = _convert_pull_request(payload.pullrequest, action)
    return PullRequestHook(
        action=action,
        pull_request=pull_request,
        repo=convert_repository(payload.repository, branch=pull_request.target.ref.name),
        sender=convert_user(payload.actor),
    )


def convert_pull_request_comment(
    payload: bitbucket.PullRequestCommentPayload,
) -> PullRequestCommentHook:
    pull_request = _convert_pull_request(payload.pullrequest, Action.CREATED)
    comment = payload.comment
    return PullRequestCommentHook(
        action=Action.CREATED,
        pull_request=pull_request,
        comment=Comment(
            id=comment.id,
            body=comment.content.raw,
            author=convert_user(comment.user),
            link=comment.links.html.href,
            created=comment.created_on,
            updated=comment.updated_on,
        ),
        repo=convert_repository(payload.repository, branch=pull_request.target.ref.name),
        sender=convert_user(payload.actor),
    )


def _convert_pull_request(src: bitbucket.PullRequest, action: Action) -> PullRequest:
    source = _convert_endpoint(src.source, "pullrequest.source.branch.name")
    return PullRequest(
        number=src.id,
        title=src.title,
        body=src.description,
        state=src.state.lower(),
        sha=source.ref.sha,
        ref=f"refs/pull-requests/{src.id}/from",
        source=source,
        target=_convert_endpoint(src.destination, "pullrequest.destination.branch.name"),
        fork=src.source.repository.full_name if src.source.repository else "",
        link=src.links.html.href,
        closed=action in (Action.MERGED, Action.CLOSED),
        merged=action is Action.MERGED,
        merge_sha=src.merge_commit.hash if src.merge_commit else "",
        author=convert_user(src.author),
        created=src.created_on,
        updated=src.updated_on,
    )


def _convert_endpoint(endpoint: bitbucket.Endpoint, field: str) -> PullRequestBranch:
    name = short_name(endpoint.branch.name, field)
    return PullRequestBranch(
        ref=Reference(name=name, sha=endpoint.commit.hash if endpoint.commit else ""),
        repo=convert_repository(endpoint.repository, branch=name) if endpoint.repository else None,
    )


def convert_repository(src: bitbucket.Repository, branch: str = "") -> Repository:
    namespace, _, name = src.full_name.rpartition("/")
    return Repository(
        id=src.uuid,
        namespace=namespace,
        name=name or src.name,
        full_name=src.full_name,
        branch=branch,
        private=src.is_private,
        clone=f"https://bitbucket.org/{src.full_name}.git",
        clone_ssh=f"git@bitbucket.org:{src.full_name}.git",
        link=src.links.html.href,
    )


def convert_user(src: bitbucket.Account) -> User:
    return User(
        login=src.login,
        name=src.display_name,
        avatar=src.links.avatar.href,
    )


def convert_commit(src: bitbucket.Target) -> Commit:
    signature = convert_signature(src.author, src)
    return Commit(
        sha=src.hash,
        message=src.message,
        author=signature,
        committer=signature,
        link=src.links.html.href,
    )


def convert_signature(author: bitbucket.CommitAuthor, target: bitbucket.Target) -> Signature:
    """Build a signature from the linked account, falling back to the raw author line."""
    account = author.user or bitbucket.Account()
    return Signature(
        login=account.login,
        name=account.display_name or author.raw.split("<", 1)[0].strip(),
        email=extract_email(author.raw),
        avatar=account.links.avatar.href,
        date=target.date,
    )


def extract_email(raw: str) -> str:
    """Pull the address out of a ``Name <email>`` author line.

    >>> extract_email("Jane Doe <jane@example.com>")
    'jane@example.com'
    """
    match = _EMAIL_RE.search(raw)
    return match.group(1) if match else ""
