"""Shared test fixtures for the secret resolver and FastAPI test client."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from scmhooks.dependencies import get_secret_resolver
from scmhooks.main import app
from scmhooks.services.secrets import InMemorySecretResolver


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def secret_resolver() -> InMemorySecretResolver:
    """Create a resolver that knows the secret of the fixture repository."""
    return InMemorySecretResolver(
        {"kaylee/hello-world": "71295b197fa25f4356d2fb9965df3f2379d903d7"},
    )


@pytest.fixture
async def client(secret_resolver: InMemorySecretResolver) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx AsyncClient with the secret resolver overridden.

    The in-memory resolver lets tests inspect every lookup the router makes.
    """
    app.dependency_overrides[get_secret_resolver] = lambda: secret_resolver
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
