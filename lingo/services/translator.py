"""Translation pass-through to Google Translate v2."""

from __future__ import annotations

import logging

import httpx

from lingo.config import settings

logger = logging.getLogger(__name__)

_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


class Translator:
    """HTTP client for Google Translate.

    Never blocks the pipeline: with no API key, or on any error, the
    original text comes back unchanged.
    """

    def __init__(self, http: httpx.AsyncClient, api_key: str | None = None, url: str = _TRANSLATE_URL) -> None:
        self._http = http
        self._api_key = api_key if api_key is not None else settings.GOOGLE_TRANSLATE_API_KEY
        self._url = url

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def translate(self, text: str, target_language: str) -> str:
        """
        Translate text into target_language.

        Returns:
            Translated text, or the input text if translation is unavailable
        """
        if not text or not self._api_key:
            return text

        try:
            response = await self._http.post(
                self._url,
                params={"key": self._api_key},
                json={"q": text, "target": target_language, "format": "text"},
            )
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"unexpected response body ({type(data).__name__})")
            error = data.get("error")
            if error:
                raise ValueError(error.get("message", "translation error") if isinstance(error, dict) else str(error))
            response.raise_for_status()
            return data["data"]["translations"][0]["translatedText"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Translation to %s failed, using original text: %s", target_language, exc)
            return text
