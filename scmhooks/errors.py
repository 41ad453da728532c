"""Exception hierarchy for webhook authentication and decoding failures.

Each error kind maps to a distinct transport response: a bad signature is an
authentication failure, a failed secret lookup is a server-side problem, and a
malformed payload is a client error.  An unrecognised event type is *not* an
error; see ``scmhooks.schemas.events.UnhandledEvent``.
"""


class WebhookError(Exception):
    """Base exception for all webhook processing errors."""


class InvalidSignatureError(WebhookError):
    """Raised when the request fails shared-secret or HMAC verification.

    Also raised when the request carries neither credential.
    """

    def __init__(self, reason: str = "invalid signature") -> None:
        super().__init__(reason)
        self.reason = reason


class SecretResolutionError(WebhookError):
    """Raised when the secret resolver fails to produce a secret for a hook."""


class MalformedPayloadError(WebhookError):
    """Raised when the body does not match the shape expected for its event.

    ``field`` holds the dotted path of the offending field when one is known
    (e.g. ``"push.changes.0.new.target.hash"``).
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PayloadTooLargeError(WebhookError):
    """Raised when a request body exceeds the configured size limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"request body exceeds {limit} bytes")
        self.limit = limit
