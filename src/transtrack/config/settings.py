"""
TransTrack Configuration Settings.

Clean, validated configuration using pydantic-settings.
"""

from typing import Annotated, Literal

from pydantic import BeforeValidator, ConfigDict, Field
from pydantic_settings import BaseSettings


def parse_csv_list(v):
    """Parse a comma-separated string or a list."""
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


CsvList = Annotated[list[str], BeforeValidator(parse_csv_list)]


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./transtrack.db",
        description="Database URL (async driver)",
    )
    echo: bool = Field(default=False, description="Echo SQL queries")

    model_config = ConfigDict(env_prefix="DB_")


class RedisSettings(BaseSettings):
    """Redis configuration for the task queue and change notifications."""

    url: str = Field(default="redis://localhost:6379/0")
    password: str | None = None
    timeout: int = Field(default=5, ge=1, le=60)

    model_config = ConfigDict(env_prefix="REDIS_")


class SecuritySettings(BaseSettings):
    """Security configuration."""

    secret_key: str = Field(
        default="dev-secret-key-change-in-production",
        description="Secret key for JWT tokens",
    )
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60)

    # Account created on first start when the user table is empty
    bootstrap_admin_username: str = Field(default="admin")
    bootstrap_admin_password: str = Field(default="password")

    # CORS
    cors_origins: CsvList = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    cors_allow_credentials: bool = False

    model_config = ConfigDict(env_prefix="SECURITY_")


class UploadSettings(BaseSettings):
    """Constraints on submitted documents."""

    max_file_size: int = Field(
        default=10 * 1024 * 1024,  # 10MB
        description="Maximum document size in bytes",
    )
    max_files_per_submission: int = Field(default=10, ge=1, le=100)
    allowed_extensions: CsvList = Field(default=[".pdf", ".docx", ".pptx"])

    model_config = ConfigDict(env_prefix="UPLOAD_")


class PipelineSettings(BaseSettings):
    """Job pipeline configuration."""

    # "local" runs the pipeline inside the API process, "arq" hands it to workers
    dispatcher: Literal["local", "arq"] = Field(default="local")
    # "local" is in-process only; "redis" is required when workers run elsewhere
    notifier: Literal["local", "redis"] = Field(default="local")
    notify_channel: str = Field(default="transtrack:jobs")

    ingest_delay: float = Field(default=3.0, ge=0, le=600, description="Seconds")
    translation_timeout: float = Field(default=60.0, gt=0, le=3600)

    # Non-terminal jobs older than this are errored by the reconciliation sweep
    stale_after_minutes: int = Field(default=30, ge=1)
    reconcile_on_startup: bool = True

    model_config = ConfigDict(env_prefix="PIPELINE_")


class TranslationSettings(BaseSettings):
    """Translation provider configuration."""

    provider: Literal["simulated", "deepl"] = Field(default="simulated")

    # Simulated provider
    success_rate: float = Field(default=0.8, ge=0.0, le=1.0)
    min_delay: float = Field(default=5.0, ge=0)
    max_delay: float = Field(default=15.0, ge=0)

    # DeepL
    deepl_api_key: str | None = None
    deepl_api_url: str = Field(default="https://api.deepl.com/v2/translate")

    model_config = ConfigDict(env_prefix="TRANSLATION_")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    env: Literal["development", "testing", "staging", "production"] = Field(
        default="development"
    )
    debug: bool = Field(default=True)

    # App info
    app_name: str = Field(default="TransTrack")
    app_version: str = Field(default="1.0.0")
    api_prefix: str = Field(default="/api/v1")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Subsettings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    translation: TranslationSettings = Field(default_factory=TranslationSettings)

    def is_production(self) -> bool:
        return self.env == "production"

    def setup(self) -> None:
        """Setup environment."""
        if self.is_production():
            self.debug = False

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Global instance
settings = Settings()
settings.setup()
