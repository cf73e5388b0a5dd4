from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase configuration
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    JWT_SECRET: str | None = None

    # Redirect targets for organization-scoped routes
    HOME_PATH: str = "/"
    ORGANIZATION_LIST_PATH: str = "/admin/organizations"

    # Seconds a resolved session is served before it is resolved again
    SESSION_TTL_SECONDS: float = 300

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


settings = Settings()
