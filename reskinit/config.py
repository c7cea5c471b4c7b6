from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RESKINIT_")

    app_name: str = "ReskinIt"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/reskinit"

    # Tokens are issued by the external auth service; we only verify them
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    cors_origins: list[str] = ["http://localhost:5173"]


settings = Settings()


# =============================================================================
# CARD SELECTION LIMITS
# =============================================================================

# Upper bound on ids accepted in a single deck selection request
MAX_DECK_SELECTION_SIZE = 1000
