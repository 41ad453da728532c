"""Git reference constants shared by every provider decoder."""

ZERO_SHA = "0" * 40

BRANCH_PREFIX = "refs/heads/"
TAG_PREFIX = "refs/tags/"
REF_PREFIX = "refs/"


def is_zero_sha(sha: str) -> bool:
    """Return True only for the 40-character all-zero sentinel."""
    return sha == ZERO_SHA


def qualify_ref(name: str, *, tag: bool) -> str:
    """Build the full reference path for a short branch or tag name.

    The prefix comes from the reference type alone; a name that already looks
    qualified is prefixed all the same.

    >>> qualify_ref("main", tag=False)
    'refs/heads/main'
    >>> qualify_ref("refs/tags/v9", tag=False)
    'refs/heads/refs/tags/v9'
    """
    return (TAG_PREFIX if tag else BRANCH_PREFIX) + name
