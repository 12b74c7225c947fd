"""Application configuration."""

from .settings import (
    Settings,
    DatabaseSettings,
    RedisSettings,
    SecuritySettings,
    UploadSettings,
    PipelineSettings,
    TranslationSettings,
    settings,
)

__all__ = [
    "Settings",
    "DatabaseSettings",
    "RedisSettings",
    "SecuritySettings",
    "UploadSettings",
    "PipelineSettings",
    "TranslationSettings",
    "settings",
]
