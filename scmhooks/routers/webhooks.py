"""Bitbucket webhook router: buffers the body once and hands it to the parser."""

import asyncio
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response, status

from scmhooks.config import settings
from scmhooks.dependencies import get_secret_resolver
from scmhooks.errors import MalformedPayloadError
from scmhooks.schemas.events import UnhandledEvent
from scmhooks.schemas.request import HookRequest
from scmhooks.services.parser import parse_webhook
from scmhooks.services.secrets import SecretResolver

logger = structlog.get_logger()

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def read_hook_request(request: Request) -> HookRequest:
    """Buffer the request body exactly once into a ``HookRequest``.

    Oversized bodies are refused as soon as they cross
    ``settings.max_body_bytes``.
    """
    return await HookRequest.from_chunks(
        request.stream(),
        method=request.method,
        headers=dict(request.headers),
        query=dict(request.query_params),
        max_body_bytes=settings.max_body_bytes,
    )


@router.post("/bitbucket")
async def bitbucket_webhook(
    response: Response,
    hook_request: Annotated[HookRequest, Depends(read_hook_request)],
    resolver: Annotated[SecretResolver, Depends(get_secret_resolver)],
) -> dict:
    """Receive a Bitbucket Cloud webhook and return its canonical form.

    Unhandled event types are acknowledged with 202 and ignored.  Errors are
    turned into responses by the exception handlers in ``scmhooks.main``.
    """
    try:
        # The resolver may block on I/O; keep it off the event loop
        result = await asyncio.to_thread(
            parse_webhook,
            hook_request,
            resolver,
            split_tag_create=settings.split_tag_create,
        )
    except MalformedPayloadError as exc:
        logger.debug(
            "webhook_malformed_body",
            field=exc.field,
            headers=hook_request.headers,
            query=hook_request.query,
            body=hook_request.body.decode("utf-8", "replace"),
        )
        raise

    if isinstance(result, UnhandledEvent):
        response.status_code = status.HTTP_202_ACCEPTED
        return {"status": "ignored", "event": result.event}

    logger.info("webhook_accepted", kind=result.kind, repo=result.repo.full_name)
    return {"status": "accepted", "kind": result.kind, "event": result.model_dump(mode="json")}
