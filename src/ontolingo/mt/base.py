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

"""Machine translation provider interface.

A provider translates one string at a time and describes, through its
``ProviderDescriptor``, which vocabularies and target languages it ships
seed translation memories for.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class TranslationResult:
    """Output of one provider call.

    Attributes:
        text: Translated text
        source_lang: Source language reported by the provider, or the one requested
        target_lang: Requested target language
        characters: Characters billed for the call
    """

    text: str
    source_lang: str
    target_lang: str
    characters: int = 0


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static facts about a provider.

    Attributes:
        identifier: Provider id, used for directory and file names
        languages: Target languages with bundled seed memories
        vocabularies: Vocabularies with bundled seed memories
    """

    identifier: str
    languages: frozenset[str] = field(default_factory=frozenset)
    vocabularies: frozenset[str] = field(default_factory=frozenset)

    def supports(self, vocabulary: str, language: str) -> bool:
        return vocabulary in self.vocabularies and language in self.languages


class BaseMTProvider(ABC):
    """Base class of every machine translation provider.

    Attributes:
        descriptor: Identifier and supported vocabularies/languages
        total_characters: Characters sent to the provider by this instance
    """

    descriptor: ProviderDescriptor

    def __init__(self) -> None:
        self.total_characters = 0

    @property
    def identifier(self) -> str:
        return self.descriptor.identifier

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> TranslationResult:
        """Translate ``text`` into ``target_lang``.

        Args:
            text: Source text, sent as is
            target_lang: Target language code (e.g., "es")
            source_lang: Source language code, or None to let the provider detect it

        Raises:
            MTError: If the provider cannot translate the text
            MTQuotaExceededError: If the account is throttled or out of quota

        Example:
            >>> result = await provider.translate("Seizure", target_lang="es")
            >>> result.text
            'Convulsión'
        """
        ...

    async def close(self) -> None:
        """Release transport resources held by the provider."""


class MTError(Exception):
    """Machine translation failed; nothing was translated."""


class MTQuotaExceededError(MTError):
    """Provider refused the request because of throttling or quota."""
