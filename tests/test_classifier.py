"""Tests for the X-Event-Key classifier."""

import pytest

from scmhooks.services.classifier import EVENT_KINDS, EventKind, classify


@pytest.mark.parametrize(
    ("event_key", "expected"),
    [
        ("repo:push", EventKind.PUSH),
        ("pullrequest:created", EventKind.PULL_REQUEST_CREATED),
        ("pullrequest:updated", EventKind.PULL_REQUEST_UPDATED),
        ("pullrequest:fulfilled", EventKind.PULL_REQUEST_FULFILLED),
        ("pullrequest:rejected", EventKind.PULL_REQUEST_REJECTED),
        ("pullrequest:comment_created", EventKind.PULL_REQUEST_COMMENT_CREATED),
    ],
)
def test_known_event_keys(event_key: str, expected: EventKind) -> None:
    assert classify(event_key) is expected


@pytest.mark.parametrize(
    "event_key",
    [
        "repo:fork",
        "issue:created",
        "REPO:PUSH",
        "repo:push ",
        "pullrequest:approved",
        "",
        None,
    ],
)
def test_unhandled_event_keys(event_key: str | None) -> None:
    assert classify(event_key) is None


def test_mapping_is_immutable() -> None:
    with pytest.raises(TypeError):
        EVENT_KINDS["repo:fork"] = EventKind.PUSH  # type: ignore[index]
