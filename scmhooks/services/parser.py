"""Single-request webhook pipeline: classify, decode, resolve secret, validate.

``parse_webhook`` is a pure function of its inputs.  It holds no state across
calls, so any number of requests may be parsed concurrently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from scmhooks.schemas.events import UnhandledEvent, Webhook
from scmhooks.services.bitbucket import decode
from scmhooks.services.classifier import classify
from scmhooks.services.signature import validate_request

if TYPE_CHECKING:
    from scmhooks.schemas.request import HookRequest
    from scmhooks.services.secrets import SecretResolver

logger = structlog.get_logger()

EVENT_KEY_HEADER = "X-Event-Key"
HOOK_UUID_HEADER = "X-Hook-UUID"


def parse_webhook(
    request: HookRequest,
    resolver: SecretResolver,
    *,
    split_tag_create: bool = False,
) -> Webhook | UnhandledEvent:
    """Turn a buffered request into a canonical hook.

    Unhandled event keys short-circuit to ``UnhandledEvent`` without consulting
    the resolver.  Handled events are decoded first so the resolver can pick a
    secret by repository; the hook is only returned once the request is
    authenticated.

    Raises:
        MalformedPayloadError: If the body does not fit the event kind.
        SecretResolutionError: If the secret lookup fails.
        InvalidSignatureError: If authentication fails.
    """
    event_key = request.header(EVENT_KEY_HEADER) or ""
    log = logger.bind(event=event_key, hook_uuid=request.header(HOOK_UUID_HEADER))

    kind = classify(event_key)
    if kind is None:
        log.info("webhook_unhandled")
        return UnhandledEvent(event=event_key)

    hook = decode(kind, request.body, split_tag_create=split_tag_create)
    validate_request(request, resolver, hook)

    log.debug("webhook_parsed", kind=hook.kind, repo=hook.repo.full_name)
    return hook
