"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Webhook gateway settings with environment variable loading and sensible defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "scmhooks"
    debug: bool = False
    log_level: str = "INFO"

    # Shared secret used by the default resolver for every repository
    webhook_secret: str = "dev-secret"
    max_body_bytes: int = 10_000_000
    # Report tag creation pushes as TagHook(action=create) instead of PushHook
    split_tag_create: bool = False


settings = Settings()
