"""Secret lookup abstraction with protocol-based swappable implementations.

The engine never decides which secret protects a repository; it asks a
``SecretResolver`` once per request.  Production code uses
``StaticSecretResolver`` with the configured webhook secret.  Tests use
``InMemorySecretResolver`` which maps repositories to secrets and records
every lookup for assertion.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from scmhooks.schemas.events import Webhook


class SecretResolver(Protocol):
    """Protocol for looking up the shared secret that guards a webhook."""

    def resolve(self, hook: Webhook) -> str:
        """Return the secret for the repository the hook belongs to.

        May perform I/O and may raise; failures are reported to the caller
        as ``SecretResolutionError``.
        """
        ...


class StaticSecretResolver:
    """Production implementation returning one configured secret for every hook."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def resolve(self, hook: Webhook) -> str:
        return self._secret


class InMemorySecretResolver:
    """Test double keyed by repository full name that records lookups."""

    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self.secrets: dict[str, str] = dict(secrets or {})
        self.calls: list[Webhook] = []

    def resolve(self, hook: Webhook) -> str:
        """Return the registered secret; raises KeyError for unknown repositories."""
        self.calls.append(hook)
        return self.secrets[hook.repo.full_name]
