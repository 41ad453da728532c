"""Map Bitbucket ``X-Event-Key`` header values onto the event kinds we decode."""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType


class EventKind(str, Enum):
    PUSH = "push"
    PULL_REQUEST_CREATED = "pull_request_created"
    PULL_REQUEST_UPDATED = "pull_request_updated"
    PULL_REQUEST_FULFILLED = "pull_request_fulfilled"
    PULL_REQUEST_REJECTED = "pull_request_rejected"
    PULL_REQUEST_COMMENT_CREATED = "pull_request_comment_created"


# Header values are matched exactly, as documented by the provider.
EVENT_KINDS: Mapping[str, EventKind] = MappingProxyType(
    {
        "repo:push": EventKind.PUSH,
        "pullrequest:created": EventKind.PULL_REQUEST_CREATED,
        "pullrequest:updated": EventKind.PULL_REQUEST_UPDATED,
        "pullrequest:fulfilled": EventKind.PULL_REQUEST_FULFILLED,
        "pullrequest:rejected": EventKind.PULL_REQUEST_REJECTED,
        "pullrequest:comment_created": EventKind.PULL_REQUEST_COMMENT_CREATED,
    }
)


def classify(event_key: str | None) -> EventKind | None:
    """Return the event kind for a header value, or None when it is unhandled.

    An unhandled event is not an error: callers should acknowledge and ignore it.
    """
    if not event_key:
        return None
    return EVENT_KINDS.get(event_key)
