"""Webhook request authentication.

Bitbucket Cloud supports two ways of proving a delivery came from the
provider, checked in this order:

1. a ``secret`` query parameter that must equal the shared secret, and
2. an ``X-Hub-Signature`` header carrying ``sha256=<hex>`` (or the legacy
   ``sha1=<hex>``), the HMAC of the raw body keyed by the shared secret.

When the query parameter is present its verdict is final: a mismatch never
falls through to the header.  Every comparison uses ``hmac.compare_digest``.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from scmhooks.errors import InvalidSignatureError, SecretResolutionError

if TYPE_CHECKING:
    from scmhooks.schemas.events import Webhook
    from scmhooks.schemas.request import HookRequest
    from scmhooks.services.secrets import SecretResolver

logger = structlog.get_logger()

SECRET_PARAM = "secret"
SIGNATURE_HEADER = "X-Hub-Signature"

_DIGESTS: Mapping[str, Callable[..., hashlib._Hash]] = MappingProxyType(
    {
        "sha256": hashlib.sha256,
        "sha1": hashlib.sha1,
    }
)


def sign(body: bytes, secret: str, algorithm: str = "sha256") -> str:
    """Compute the ``<algorithm>=<hex>`` signature header value for a body."""
    digest = hmac.new(
        secret.encode("utf-8"),
        msg=body,
        digestmod=_DIGESTS[algorithm],
    ).hexdigest()
    return f"{algorithm}={digest}"


def validate_signature(body: bytes, secret: str, signature: str) -> bool:
    """Check a signature header value against the body.

    Unknown algorithm prefixes are rejected.  Hex digits are compared
    case-insensitively.
    """
    algorithm, sep, digest = signature.partition("=")
    if not sep or algorithm not in _DIGESTS:
        return False
    expected = sign(body, secret, algorithm)
    provided = f"{algorithm}={digest.lower()}"
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def validate_shared_secret(provided: str, secret: str) -> bool:
    """Exact, constant-time equality of the query parameter and the secret."""
    return hmac.compare_digest(provided.encode("utf-8"), secret.encode("utf-8"))


def validate(request: HookRequest, secret: str) -> None:
    """Authenticate a buffered request against a known secret.

    Raises:
        InvalidSignatureError: If the credential present does not match, or
            the request carries neither a ``secret`` parameter nor a
            signature header.
    """
    provided = request.query_param(SECRET_PARAM)
    if provided:
        if not validate_shared_secret(provided, secret):
            raise InvalidSignatureError("shared secret mismatch")
        return

    signature = request.header(SIGNATURE_HEADER)
    if not signature:
        raise InvalidSignatureError("missing secret parameter and signature header")
    if not validate_signature(request.body, secret, signature):
        raise InvalidSignatureError("signature mismatch")


def validate_request(request: HookRequest, resolver: SecretResolver, hook: Webhook) -> None:
    """Resolve the secret for ``hook`` (exactly once) and authenticate the request.

    Raises:
        SecretResolutionError: If the resolver fails or returns an empty secret.
        InvalidSignatureError: If authentication fails.
    """
    try:
        secret = resolver.resolve(hook)
    except SecretResolutionError:
        raise
    except Exception as exc:
        logger.warning("secret_resolution_failed", repo=hook.repo.full_name, error=str(exc))
        msg = f"secret lookup failed for {hook.repo.full_name}"
        raise SecretResolutionError(msg) from exc

    if not secret:
        msg = f"no secret configured for {hook.repo.full_name}"
        raise SecretResolutionError(msg)

    validate(request, secret)
