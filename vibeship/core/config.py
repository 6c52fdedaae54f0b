"""Application settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"

    # Public base URL used in prompts, webhook URLs and screenshot links
    app_url: str = "http://localhost:8000"

    # Storage
    database_url: str = "sqlite+aiosqlite:///./data/vibeship.db"
    screenshot_dir: str = "./data/screenshots"
    screenshot_max_bytes: int = 5 * 1024 * 1024

    # GitHub
    github_api_url: str = "https://api.github.com"
    github_webhook_secret: str | None = None

    # Fernet key for GitHub OAuth tokens at rest
    token_encryption_key: str | None = None

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def base_url(self) -> str:
        return self.app_url.rstrip("/")

    @property
    def webhook_url(self) -> str:
        """URL owners configure in their GitHub repository settings."""
        return f"{self.base_url}/api/webhooks/github"


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()


settings = get_settings()
