# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""DeepL provider for vocabulary term translation.

Talks to the DeepL v2 REST API with aiohttp. Free-tier keys use the
``api-free`` host, paid keys the regular one.

API Documentation: https://developers.deepl.com/docs
"""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from .base import (
    BaseMTProvider,
    MTError,
    MTQuotaExceededError,
    ProviderDescriptor,
    TranslationResult,
)

logger = logging.getLogger(__name__)

DEEPL_API_FREE = "https://api-free.deepl.com/v2"
DEEPL_API_PRO = "https://api.deepl.com/v2"

# 456 is DeepL's "character quota exhausted"
QUOTA_STATUSES = (429, 456)


class DeepLProvider(BaseMTProvider):
    """DeepL provider with seed memories for HPO in Spanish, French and German.

    Term names and definitions are short, self-contained strings, so
    sentence splitting is switched off and source formatting is kept.

    Example:
        >>> deepl = DeepLProvider(api_key="...:fx")
        >>> result = await deepl.translate("Seizure", target_lang="es", source_lang="en")
        >>> result.text
        'Convulsión'
    """

    descriptor = ProviderDescriptor(
        identifier="deepl",
        languages=frozenset({"es", "fr", "de"}),
        vocabularies=frozenset({"hpo"}),
    )

    def __init__(self, api_key: str, use_free_api: bool = True, timeout: float = 30.0):
        """Initialize DeepL provider.

        Args:
            api_key: DeepL authentication key
            use_free_api: Send requests to the free-tier host
            timeout: Total timeout of one HTTP request, in seconds
        """
        super().__init__()
        self.api_key = api_key
        self.base_url = DEEPL_API_FREE if use_free_api else DEEPL_API_PRO
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @staticmethod
    def _normalize_language(lang: str) -> str:
        """DeepL language code for ``lang`` ("es-MX" -> "ES", "de_AT" -> "DE")."""
        return lang.replace("_", "-").split("-")[0].upper()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one API request and return the decoded JSON body.

        Raises:
            MTQuotaExceededError: On throttling or an exhausted character quota
            MTError: On any other HTTP or transport failure
        """
        session = await self._get_session()
        try:
            async with session.request(method, f"{self.base_url}{path}", **kwargs) as response:
                if response.status == 403:
                    raise MTError("DeepL authentication failed: check the API key")
                if response.status in QUOTA_STATUSES:
                    raise MTQuotaExceededError(f"DeepL quota exceeded ({response.status})")
                if response.status >= 400:
                    detail = await response.text()
                    raise MTError(f"DeepL API error ({response.status}): {detail}")
                return await response.json()
        except aiohttp.ClientError as e:
            raise MTError(f"DeepL connection error: {e}") from e

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> TranslationResult:
        """Translate a single term field.

        Raises:
            MTError: If the request fails or DeepL returns nothing
            MTQuotaExceededError: If the account quota is exhausted
        """
        payload: dict[str, Any] = {
            "text": [text],
            "target_lang": self._normalize_language(target_lang),
            "split_sentences": "0",
            "preserve_formatting": True,
        }
        if source_lang:
            payload["source_lang"] = self._normalize_language(source_lang)

        data = await self._request("POST", "/translate", json=payload)
        translations = data.get("translations") or []
        if not translations:
            raise MTError("DeepL returned no translations")

        first = translations[0]
        self.total_characters += len(text)
        logger.debug(f"DeepL translated {len(text)} characters into {target_lang}")
        return TranslationResult(
            text=first.get("text", ""),
            source_lang=first.get("detected_source_language", source_lang or ""),
            target_lang=target_lang,
            characters=len(text),
        )

    async def get_usage(self) -> dict[str, int]:
        """Characters billed so far in the current period, and the period limit."""
        data = await self._request("GET", "/usage")
        return {
            "character_count": int(data.get("character_count", 0)),
            "character_limit": int(data.get("character_limit", 0)),
        }

    def __del__(self) -> None:
        if self._session is not None and not self._session.closed:
            logger.warning("DeepLProvider session left open; call 'await provider.close()'")
