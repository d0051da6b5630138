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

"""Microsoft Translator (Azure AI Translator) provider.

Uses the Translator v3 REST API via aiohttp.

API Documentation: https://learn.microsoft.com/azure/ai-services/translator/reference/v3-0-translate
"""

from __future__ import annotations

import logging

import aiohttp

from .base import (
    BaseMTProvider,
    MTError,
    MTQuotaExceededError,
    ProviderDescriptor,
    TranslationResult,
)

logger = logging.getLogger(__name__)

MICROSOFT_TRANSLATOR_API = "https://api.cognitive.microsofttranslator.com"
API_VERSION = "3.0"


class MicrosoftProvider(BaseMTProvider):
    """Microsoft Translator provider.

    Example:
        >>> provider = MicrosoftProvider(api_key="...", region="westeurope")
        >>> result = await provider.translate("Seizure", target_lang="es")
        >>> print(result.text)
        'Convulsión'
    """

    descriptor = ProviderDescriptor(
        identifier="microsoft",
        languages=frozenset({"es"}),
        vocabularies=frozenset({"hpo"}),
    )

    def __init__(
        self,
        api_key: str,
        region: str | None = None,
        endpoint: str = MICROSOFT_TRANSLATOR_API,
        timeout: float = 30.0,
    ):
        """Initialize Microsoft Translator provider.

        Args:
            api_key: Translator resource subscription key
            region: Azure region of the resource (required for regional resources)
            endpoint: Translator endpoint
            timeout: Request timeout in seconds
        """
        super().__init__()
        self.api_key = api_key
        self.region = region
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {
                "Ocp-Apim-Subscription-Key": self.api_key,
                "Content-Type": "application/json",
            }
            if self.region:
                headers["Ocp-Apim-Subscription-Region"] = self.region
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=headers,
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> TranslationResult:
        """Translate text using the Translator API.

        Raises:
            MTError: If translation fails
            MTQuotaExceededError: If the request is throttled or quota exceeded
        """
        session = await self._get_session()
        params = {"api-version": API_VERSION, "to": target_lang}
        if source_lang:
            params["from"] = source_lang

        try:
            async with session.post(
                f"{self.endpoint}/translate", params=params, json=[{"Text": text}]
            ) as response:
                if response.status in (401, 403):
                    raise MTError("Microsoft Translator authentication failed")
                if response.status == 429:
                    raise MTQuotaExceededError("Microsoft Translator quota exceeded")
                if response.status >= 400:
                    error_text = await response.text()
                    raise MTError(
                        f"Microsoft Translator API error ({response.status}): {error_text}"
                    )

                data = await response.json()

        except aiohttp.ClientError as e:
            raise MTError(f"Microsoft Translator connection error: {e}") from e

        try:
            translation = data[0]["translations"][0]
        except (IndexError, KeyError, TypeError) as e:
            raise MTError(f"Unexpected Microsoft Translator response: {data!r}") from e

        detected = data[0].get("detectedLanguage", {}).get("language", source_lang or "")
        self.total_characters += len(text)
        return TranslationResult(
            text=translation.get("text", ""),
            source_lang=detected,
            target_lang=translation.get("to", target_lang),
            characters=len(text),
        )

    def __del__(self) -> None:
        """Cleanup: warn if session not properly closed."""
        if self._session and not self._session.closed:
            logger.warning(
                "MicrosoftProvider session not properly closed. Use 'await provider.close()'"
            )
