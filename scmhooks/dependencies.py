"""Centralized FastAPI dependencies for use with Depends()."""

from scmhooks.config import settings
from scmhooks.services.secrets import SecretResolver, StaticSecretResolver

_secret_resolver: SecretResolver = StaticSecretResolver(settings.webhook_secret)


def init_secret_resolver(resolver: SecretResolver) -> None:
    """Swap the default static resolver for an application-provided one.

    Embedding applications call this at startup to look secrets up per
    repository (database, vault, ...).
    """
    global _secret_resolver  # noqa: PLW0603

    _secret_resolver = resolver


def get_secret_resolver() -> SecretResolver:
    """Return the application secret resolver instance.

    Defaults to ``StaticSecretResolver`` with ``settings.webhook_secret``.
    Swapped by ``init_secret_resolver()``.
    """
    return _secret_resolver


__all__ = [
    "get_secret_resolver",
    "init_secret_resolver",
]
