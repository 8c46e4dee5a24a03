from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="AfuSocial API", description="Human readable service name")
    environment: str = Field(default="development", description="Deployment environment name")
    debug: bool = Field(default=False, description="Enable debug mode and SQL echo")

    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(default=5000, description="Port the HTTP server listens on")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:5000",
            "http://localhost:5173",
            "http://127.0.0.1",
            "http://127.0.0.1:5000",
        ],
        description="List of allowed CORS origins",
    )

    database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy database URL. Overrides the DB_* parts when set.",
    )
    db_user: str = Field(default="afusocial")
    db_password: str = Field(default="afusocial")
    db_host: str = Field(default="db")
    db_port: int = Field(default=3306)
    db_name: str = Field(default="afusocial")

    jwt_secret_key: str = Field(default="changeme", description="Secret shared with the identity provider")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)

    feed_page_size_default: int = Field(default=20)
    feed_page_size_max: int = Field(default=100)
    search_result_limit: int = Field(default=20)

    openai_api_key: str | None = Field(
        default=None,
        description="Credential for the hosted chat-completion API.",
    )
    ai_api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the chat-completion API.",
    )
    ai_model: str = Field(default="gpt-4o", description="Model identifier used for completions")
    ai_request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every chat-completion request.",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("database_url", "openai_api_key", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value in (None, "", Ellipsis):
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
