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

"""Tiered translation of vocabulary term fields.

Resolves every requested field in order:
1. Human translation (curated resource), when an extension is attached
2. Translation Memory (previous machine translations)
3. Live machine translation, committed to the Translation Memory

Returns the number of characters sent to the provider, so callers can
budget API usage with ``get_missing_characters`` before translating.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ontolingo.memory import TranslationMemory, TranslationUnit
from ontolingo.memory.xliff import SOURCE_LANGUAGE, is_storable_term_id, is_storable_text
from ontolingo.vocabulary.human import HumanTranslationExtension
from ontolingo.vocabulary.term import VocabularyTerm, target_field

from .base import BaseMTProvider, MTError
from .bootstrap import bootstrap_provider_home

logger = logging.getLogger(__name__)


class UnsupportedFieldError(TypeError):
    """Raised when a field cannot be translated (multivalued, or not storable as XML)."""


class UnsupportedLanguageError(ValueError):
    """Raised when a provider does not support a vocabulary/language pair."""


class UnsupportedTermError(ValueError):
    """Raised when a term id cannot be stored in the Translation Memory."""


class MachineTranslator:
    """Translation resolver for one machine translation provider.

    Owns the provider's Translation Memory. Vocabularies must be loaded with
    ``load_vocabulary`` before translating and unloaded with
    ``unload_vocabulary`` to persist new translations.

    Example:
        >>> translator = MachineTranslator(DeepLProvider(api_key="..."), "~/.ontolingo")
        >>> translator.initialize()
        >>> await translator.load_vocabulary("hpo", "es")
        >>> cost = await translator.translate("hpo", term, ["name", "def"], "es")
        >>> await translator.unload_vocabulary("hpo", "es")
    """

    def __init__(
        self,
        provider: BaseMTProvider,
        translations_root: str | Path,
        human: HumanTranslationExtension | None = None,
        seeds_dir: str | Path | None = None,
        timeout: float | None = 30.0,
    ):
        """Initialize translator.

        Args:
            provider: Machine translation provider
            translations_root: Root directory of provider memory files
            human: Human translation extension consulted before the memory
            seeds_dir: Override for the bundled seed memories
            timeout: Seconds allowed per provider call (None for no limit)
        """
        self.provider = provider
        self.translations_root = Path(translations_root).expanduser()
        self.human = human
        self.seeds_dir = seeds_dir
        self.timeout = timeout
        self.memory: TranslationMemory | None = None
        self.total_characters = 0

    @property
    def identifier(self) -> str:
        return self.provider.identifier

    @property
    def home(self) -> Path:
        return self.translations_root / self.identifier

    def initialize(self) -> None:
        """Install seed memories and make the translator usable.

        Raises:
            BootstrapError: If the seeds cannot be installed; the translator
                stays unusable
        """
        if self.memory is not None:
            return
        home = bootstrap_provider_home(
            self.provider.descriptor, self.translations_root, self.seeds_dir
        )
        self.memory = TranslationMemory(home, self.identifier)

    def _get_memory(self) -> TranslationMemory:
        if self.memory is None:
            raise RuntimeError(
                f"Machine translator {self.identifier} not initialized. Call initialize() first."
            )
        return self.memory

    def supports(self, vocabulary: str, language: str) -> bool:
        return self.provider.descriptor.supports(vocabulary, language)

    async def load_vocabulary(self, vocabulary: str, language: str) -> int:
        """Load the Translation Memory of a vocabulary.

        Returns:
            Number of cached translations

        Raises:
            UnsupportedLanguageError: If the provider does not handle the pair
            TranslationMemoryError: If the memory file is unreadable
        """
        memory = self._get_memory()
        if not self.supports(vocabulary, language):
            raise UnsupportedLanguageError(
                f"{self.identifier} does not translate {vocabulary} into {language}"
            )
        return await memory.load(vocabulary, language)

    async def unload_vocabulary(self, vocabulary: str, language: str) -> None:
        """Persist and drop the Translation Memory of a vocabulary.

        Raises:
            VocabularyNotLoadedError: If the vocabulary is not loaded
            TranslationMemoryError: If writing fails; state is kept for a retry
        """
        await self._get_memory().unload(vocabulary, language)

    async def discard_vocabulary(self, vocabulary: str, language: str) -> None:
        """Drop the Translation Memory of a vocabulary without persisting it.

        Raises:
            VocabularyNotLoadedError: If the vocabulary is not loaded
        """
        await self._get_memory().discard(vocabulary, language)

    async def _resolve(
        self, memory: TranslationMemory, vocabulary: str, language: str, term_id: str, field: str
    ) -> str | None:
        if self.human is not None:
            human_text = self.human.lookup(vocabulary, language, term_id, field)
            if human_text is not None:
                return human_text

        unit = await memory.lookup(vocabulary, language, term_id, field)
        return unit.target_text if unit is not None else None

    async def _machine_translate(self, text: str, language: str) -> str:
        try:
            result = await asyncio.wait_for(
                self.provider.translate(text, target_lang=language, source_lang=SOURCE_LANGUAGE),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise MTError(
                f"{self.identifier} did not answer within {self.timeout} seconds"
            ) from e
        return result.text

    async def translate(
        self,
        vocabulary: str,
        term: VocabularyTerm,
        fields: Iterable[str],
        language: str,
    ) -> int:
        """Translate term fields into ``{field}_{language}``.

        Args:
            vocabulary: Vocabulary the term belongs to
            term: Term to read source fields from and write translations to
            fields: Source field names
            language: Target language code

        Returns:
            Number of characters sent to the provider

        Raises:
            VocabularyNotLoadedError: If the vocabulary is not loaded
            UnsupportedFieldError: If a field needing translation is multivalued or
                holds characters XML cannot store; nothing is translated in that case
            UnsupportedTermError: If a field needs translation but the term id
                cannot be stored; nothing is translated in that case
            MTError: If the provider fails; the field is not cached
        """
        memory = self._get_memory()
        memory.ensure_loaded(vocabulary, language)

        pending: list[tuple[str, str]] = []
        for field in fields:
            translated_field = target_field(field, language)
            known = await self._resolve(memory, vocabulary, language, term.id, field)
            if known is not None:
                term.set(translated_field, known)
                continue

            value = term.get(field)
            if isinstance(value, str):
                if not is_storable_text(value):
                    raise UnsupportedFieldError(
                        f"Field {field} of {term.id} contains characters not allowed in XML"
                    )
                pending.append((field, value))
            elif value is None:
                logger.debug(f"{term.id} has no {field}, nothing to translate")
            else:
                raise UnsupportedFieldError(
                    f"Cannot translate multivalued field {field} of {term.id}"
                )

        if pending and not is_storable_term_id(term.id):
            raise UnsupportedTermError(
                f"Cannot store translations of {term.id!r}, expected a PREFIX:digits id"
            )

        count = 0
        for field, source in pending:
            translated = await self._machine_translate(source, language)
            self.total_characters += len(source)
            try:
                unit = TranslationUnit(
                    term_id=term.id, field=field, source_text=source, target_text=translated
                )
            except ValidationError as e:
                raise MTError(
                    f"{self.identifier} returned an unusable translation of {term.id}/{field}"
                ) from e

            term.set(target_field(field, language), unit.target_text)
            await memory.put(vocabulary, language, unit)
            count += len(source)
            logger.debug(f"Machine translated {term.id}/{field} ({len(source)} characters)")

        return count

    async def get_missing_characters(
        self,
        vocabulary: str,
        term: VocabularyTerm,
        fields: Iterable[str],
        language: str,
    ) -> int:
        """Count the characters ``translate`` would send to the provider.

        Neither the term nor the Translation Memory is modified. Multivalued
        fields are not counted.

        Raises:
            VocabularyNotLoadedError: If the vocabulary is not loaded
        """
        memory = self._get_memory()
        memory.ensure_loaded(vocabulary, language)

        count = 0
        for field in fields:
            if await self._resolve(memory, vocabulary, language, term.id, field) is not None:
                continue
            value = term.get(field)
            if isinstance(value, str):
                count += len(value)
        return count

    def statistics(self) -> dict[str, Any]:
        """Get usage and Translation Memory statistics."""
        return {
            "provider": self.identifier,
            "total_characters": self.total_characters,
            "memories": self.memory.statistics() if self.memory is not None else {},
        }

    async def close(self) -> None:
        await self.provider.close()
