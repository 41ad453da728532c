"""Tests for production hardening: exception handler, structlog usage and logging setup."""

from __future__ import annotations

import importlib
import inspect
import json
import logging
from pathlib import Path

import pytest
import structlog


@pytest.mark.anyio
async def test_global_exception_handler_returns_json() -> None:
    """The unhandled_exception_handler returns JSON with status 500."""
    from unittest.mock import MagicMock

    from scmhooks.main import unhandled_exception_handler

    mock_request = MagicMock()
    mock_request.url.path = "/test"
    mock_request.method = "POST"

    response = await unhandled_exception_handler(mock_request, Exception("boom"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"detail": "Internal server error"}


@pytest.mark.anyio
async def test_resolver_crash_is_reported_as_500() -> None:
    """A resolver that raises is surfaced as a 500, never as a signature failure."""
    from httpx import ASGITransport, AsyncClient

    from scmhooks.dependencies import get_secret_resolver
    from scmhooks.main import app

    class _Broken:
        def resolve(self, hook: object) -> str:
            raise RuntimeError("vault sealed")

    app.dependency_overrides[get_secret_resolver] = _Broken
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            body = (Path(__file__).parent / "fixtures" / "bitbucket" / "push.json").read_bytes()
            response = await client.post(
                "/webhooks/bitbucket",
                content=body,
                headers={"X-Event-Key": "repo:push"},
                params={"secret": "anything"},
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Secret resolution failed"}


def test_configure_logging_installs_single_stdout_handler() -> None:
    from scmhooks.logging_config import configure_logging

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(json_logs=True, log_level="debug")
        configure_logging(json_logs=False, log_level="warning")

        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()


@pytest.mark.parametrize(
    "module_path",
    [
        "scmhooks.routers.webhooks",
        "scmhooks.services.bitbucket",
        "scmhooks.services.parser",
        "scmhooks.services.signature",
    ],
)
def test_no_stdlib_logging(module_path: str) -> None:
    """Application modules must use structlog, not stdlib logging.getLogger."""
    module = importlib.import_module(module_path)
    source = inspect.getsource(module)
    assert "logging.getLogger" not in source, f"{module_path} uses stdlib logging"
    assert "structlog" in source, f"{module_path} should use structlog"


@pytest.mark.parametrize("module_path", ["scmhooks.services.signature"])
def test_constant_time_comparisons(module_path: str) -> None:
    """Secrets and digests are compared with hmac.compare_digest, never ==."""
    source = inspect.getsource(importlib.import_module(module_path))
    assert "compare_digest" in source


def test_redact_credentials_masks_secret_and_signature() -> None:
    from scmhooks.logging_config import REDACTED, redact_credentials

    event = redact_credentials(
        None,
        "debug",
        {
            "event": "webhook_malformed_body",
            "headers": {"x-hub-signature": "sha256=abc", "x-event-key": "repo:push"},
            "query": {"secret": "hunter2"},
        },
    )

    assert event["headers"] == {"x-hub-signature": REDACTED, "x-event-key": "repo:push"}
    assert event["query"] == {"secret": REDACTED}


def test_configured_output_never_contains_credentials(capsys: pytest.CaptureFixture[str]) -> None:
    from scmhooks.logging_config import configure_logging

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(json_logs=True, log_level="debug")
        structlog.get_logger("scmhooks.test").debug(
            "webhook_malformed_body",
            headers={"X-Hub-Signature": "sha256=deadbeef"},
            query={"secret": "hunter2"},
        )
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()

    line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert line["event"] == "webhook_malformed_body"
    assert "deadbeef" not in json.dumps(line)
    assert "hunter2" not in json.dumps(line)
