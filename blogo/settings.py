from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # Server
    HOST: str = "localhost"
    PORT: int = 8000
    PUBLIC_URL: str = ""

    # Blog
    BLOG_TITLE: str = "Minimal Blog"
    BLOG_DESCRIPTION: str = "A minimal file-backed blog"
    BLOG_AUTHOR: str = ""
    POSTS_DIR: str = "content/posts"
    PUBLIC_DIR: str = "public"
    POSTS_PER_PAGE: int = 10

    # Cache
    CACHE_TTL_SECONDS: Optional[float] = 300
    WARM_CACHE_ON_STARTUP: bool = True

    # View counts
    VIEWS_DATABASE_URL: str = "sqlite:///./views.db"

    # Logging
    LOG_LEVEL: str = "INFO"

    # AT Protocol
    ATPROTO_DID: str = ""
    ATPROTO_HANDLE: str = ""
    ATPROTO_APP_PASSWORD: str = ""
    ATPROTO_SERVICE: str = "https://bsky.social"
    ATPROTO_TIMEOUT_SECONDS: float = 10.0

    @property
    def public_url(self) -> str:
        return (self.PUBLIC_URL or f"http://{self.HOST}:{self.PORT}").rstrip("/")

    @property
    def watch_enabled(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def atproto_configured(self) -> bool:
        return bool(self.ATPROTO_DID and self.ATPROTO_HANDLE and self.ATPROTO_APP_PASSWORD)

    @property
    def publication_uri(self) -> str:
        return f"at://{self.ATPROTO_DID}/site.standard.publication/self"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
