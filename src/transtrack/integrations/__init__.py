"""External service integrations."""

from .translation import (
    DEEPL_LANGUAGE_CODES,
    TranslationEngine,
    SimulatedTranslationEngine,
    DeepLTranslationEngine,
    build_translation_engine,
    deepl_code,
)

__all__ = [
    "DEEPL_LANGUAGE_CODES",
    "TranslationEngine",
    "SimulatedTranslationEngine",
    "DeepLTranslationEngine",
    "build_translation_engine",
    "deepl_code",
]
