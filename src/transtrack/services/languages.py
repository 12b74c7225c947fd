"""Supported languages. Fixed lists, not user-editable."""

SOURCE_LANGUAGES: tuple[str, ...] = (
    "English", "French", "German", "Spanish", "Italian", "Portuguese", "Dutch",
    "Polish", "Russian", "Japanese", "Chinese", "Korean",
)

# Every source language can also be a target
TARGET_LANGUAGES: tuple[str, ...] = SOURCE_LANGUAGES + ("Arabic", "Turkish")


def get_language_options() -> dict[str, list[str]]:
    return {"source": list(SOURCE_LANGUAGES), "target": list(TARGET_LANGUAGES)}
