from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    DATABASE_URL: str | None = None

    # Token verification
    JWT_SECRET: str | None = None
    JWKS_URL: str | None = None

    # Application URLs
    APP_BASE_URL: str = "http://localhost:8001"  # Default for development

    # Sharing entitlement
    SHARING_ENTERPRISE_ENABLED: bool = True
    SHARING_ENTITLED_RESOURCE_KINDS: list[str] = ["work_item", "saved_query"]

    # Invite delivery
    INVITE_WEBHOOK_URL: str | None = None
    INVITE_WEBHOOK_TIMEOUT: int = 10  # seconds

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


settings = Settings()
