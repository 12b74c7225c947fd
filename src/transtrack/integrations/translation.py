"""
Translation engines.

The lifecycle engine only needs ``translate(text, source, target)``. Two
implementations are provided: a simulated provider reproducing the timing
and failure rate of the demo service, and a DeepL v2 client.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Protocol

import httpx

from transtrack.config import TranslationSettings
from transtrack.core.exceptions import TranslationEngineError

logger = logging.getLogger(__name__)


# Language names used in job records -> DeepL language codes
DEEPL_LANGUAGE_CODES = {
    "English": "EN",
    "French": "FR",
    "German": "DE",
    "Spanish": "ES",
    "Italian": "IT",
    "Portuguese": "PT",
    "Dutch": "NL",
    "Polish": "PL",
    "Russian": "RU",
    "Japanese": "JA",
    "Chinese": "ZH",
    "Korean": "KO",
    "Arabic": "AR",
    "Turkish": "TR",
}


class TranslationEngine(Protocol):
    """External text translation provider."""

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        ...


def deepl_code(language: str) -> str:
    """Map a language name to its DeepL code."""
    try:
        return DEEPL_LANGUAGE_CODES[language]
    except KeyError:
        raise TranslationEngineError(f"Language not supported by DeepL: {language}", provider="deepl")


class SimulatedTranslationEngine:
    """
    Stand-in provider.

    Waits a random time between ``min_delay`` and ``max_delay`` seconds, then
    fails with probability ``1 - success_rate``. On success the text is
    returned tagged with the target language.
    """

    def __init__(
        self,
        success_rate: float = 0.8,
        min_delay: float = 5.0,
        max_delay: float = 15.0,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError("Invalid delay range")
        self.success_rate = success_rate
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        await self._sleep(self._rng.uniform(self.min_delay, self.max_delay))
        if self._rng.random() >= self.success_rate:
            raise TranslationEngineError("Simulated provider failure", provider="simulated")
        return f"[{target_language}] {text}"


class DeepLTranslationEngine:
    """Client for the DeepL v2 ``/translate`` endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.deepl.com/v2/translate",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        payload = {
            "text": [text],
            "source_lang": deepl_code(source_language),
            "target_lang": deepl_code(target_language),
        }
        headers = {"Authorization": f"DeepL-Auth-Key {self.api_key}"}

        logger.info(f"Requesting DeepL translation {source_language} -> {target_language}")
        try:
            response = await self._client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise TranslationEngineError(f"DeepL request failed: {e}", provider="deepl") from e

        if response.status_code >= 400:
            logger.error(f"DeepL API error: {response.status_code} - {response.text[:500]}")
            raise TranslationEngineError(f"DeepL API error: {response.status_code}", provider="deepl")

        try:
            translated = response.json()["translations"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationEngineError("Malformed DeepL response", provider="deepl") from e

        if not isinstance(translated, str) or not translated.strip():
            raise TranslationEngineError("DeepL returned an empty translation", provider="deepl")
        return translated

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def build_translation_engine(config: TranslationSettings) -> TranslationEngine:
    """Create the configured provider."""
    if config.provider == "deepl":
        if not config.deepl_api_key:
            raise ValueError("TRANSLATION_DEEPL_API_KEY is required for the deepl provider")
        return DeepLTranslationEngine(config.deepl_api_key, config.deepl_api_url)
    return SimulatedTranslationEngine(
        success_rate=config.success_rate,
        min_delay=config.min_delay,
        max_delay=config.max_delay,
    )
