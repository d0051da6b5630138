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

"""Translation Memory for machine translated vocabulary terms.

Caches machine translations of term fields per vocabulary and language:
- Explicit load/unload lifecycle per (vocabulary, language)
- One XLIFF file per provider, vocabulary and language
- Per-pair locking so concurrent indexing workers never see half-loaded state
- Batched persistence: units are flushed to disk only on unload
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from .xliff import TranslationMemoryError, TranslationUnit, UnitKey, read_units, write_units

logger = logging.getLogger(__name__)

PairKey = tuple[str, str]


class VocabularyNotLoadedError(TranslationMemoryError):
    """Raised when a vocabulary is used outside its load/unload window."""


class TranslationMemory:
    """Translation Memory backed by XLIFF files.

    Every (vocabulary, language) pair moves through UNLOADED -> LOADED ->
    UNLOADED. Lookups and inserts are only legal while LOADED and never
    trigger an implicit load.

    Example:
        >>> tm = TranslationMemory(Path("~/.ontolingo/microsoft"), "microsoft")
        >>> await tm.load("hpo", "es")
        >>> unit = await tm.lookup("hpo", "es", "HP:0000118", "name")
        >>> await tm.unload("hpo", "es")
    """

    def __init__(self, home: str | Path, identifier: str):
        """Initialize Translation Memory.

        Args:
            home: Directory holding the provider's memory files
            identifier: Provider identifier used as file name prefix
        """
        self.home = Path(home)
        self.identifier = identifier
        self._units: dict[PairKey, dict[UnitKey, TranslationUnit]] = {}
        self._dirty: dict[PairKey, int] = {}
        self._skipped: dict[PairKey, list[Any]] = {}
        self._locks: dict[PairKey, asyncio.Lock] = {}

    def path_for(self, vocabulary: str, language: str) -> Path:
        """Get the memory file for a vocabulary and language."""
        return self.home / f"{self.identifier}_{vocabulary}_{language}.xliff"

    def _lock(self, vocabulary: str, language: str) -> asyncio.Lock:
        return self._locks.setdefault((vocabulary, language), asyncio.Lock())

    def _require(self, vocabulary: str, language: str) -> dict[UnitKey, TranslationUnit]:
        units = self._units.get((vocabulary, language))
        if units is None:
            raise VocabularyNotLoadedError(
                f"Vocabulary {vocabulary} never initialized for language {language}"
            )
        return units

    def is_loaded(self, vocabulary: str, language: str) -> bool:
        return (vocabulary, language) in self._units

    def ensure_loaded(self, vocabulary: str, language: str) -> None:
        """Raise VocabularyNotLoadedError unless the pair is loaded."""
        self._require(vocabulary, language)

    def loaded(self) -> list[PairKey]:
        return sorted(self._units)

    async def load(self, vocabulary: str, language: str) -> int:
        """Read the memory file for a vocabulary into memory.

        Replaces any state already held for the pair. A missing file yields
        an empty memory.

        Args:
            vocabulary: Vocabulary name (e.g., "hpo")
            language: Target language code (e.g., "es")

        Returns:
            Number of units loaded

        Raises:
            TranslationMemoryError: If the file exists but cannot be parsed
        """
        async with self._lock(vocabulary, language):
            path = self.path_for(vocabulary, language)
            skipped: list[Any] = []
            if path.exists():
                units = read_units(path, skipped)
            else:
                logger.info(f"No translation memory at {path}, starting empty")
                units = {}

            self._units[(vocabulary, language)] = units
            self._dirty[(vocabulary, language)] = 0
            self._skipped[(vocabulary, language)] = skipped
            logger.info(f"Loaded {len(units)} translations for {vocabulary}/{language}")
            return len(units)

    async def unload(self, vocabulary: str, language: str) -> None:
        """Persist the units of a vocabulary and drop them from memory.

        Raises:
            VocabularyNotLoadedError: If the pair is not loaded
            TranslationMemoryError: If writing fails; the units stay loaded
        """
        async with self._lock(vocabulary, language):
            units = self._require(vocabulary, language)
            path = self.path_for(vocabulary, language)
            path.parent.mkdir(parents=True, exist_ok=True)
            skipped = self._skipped.get((vocabulary, language), [])
            write_units(path, units, vocabulary, language, skipped)

            del self._units[(vocabulary, language)]
            self._skipped.pop((vocabulary, language), None)
            added = self._dirty.pop((vocabulary, language), 0)
            logger.info(
                f"Unloaded {vocabulary}/{language}: {len(units)} translations "
                f"({added} new) written to {path}"
            )

    async def discard(self, vocabulary: str, language: str) -> None:
        """Drop the units of a vocabulary without writing them.

        The memory file is left untouched.

        Raises:
            VocabularyNotLoadedError: If the pair is not loaded
        """
        async with self._lock(vocabulary, language):
            self._require(vocabulary, language)
            del self._units[(vocabulary, language)]
            self._skipped.pop((vocabulary, language), None)
            added = self._dirty.pop((vocabulary, language), 0)
            if added:
                logger.warning(f"Discarded {added} new translations for {vocabulary}/{language}")

    async def lookup(
        self, vocabulary: str, language: str, term_id: str, field: str
    ) -> TranslationUnit | None:
        """Find the cached translation of a term field.

        Raises:
            VocabularyNotLoadedError: If the pair is not loaded
        """
        async with self._lock(vocabulary, language):
            return self._require(vocabulary, language).get((term_id, field))

    async def put(self, vocabulary: str, language: str, unit: TranslationUnit) -> None:
        """Insert or overwrite a unit.

        Raises:
            VocabularyNotLoadedError: If the pair is not loaded
        """
        async with self._lock(vocabulary, language):
            units = self._require(vocabulary, language)
            units[unit.key] = unit
            self._dirty[(vocabulary, language)] += 1

    def statistics(self) -> dict[str, Any]:
        """Get unit counts for every loaded pair.

        Returns:
            Dictionary keyed by "vocabulary/language" with unit and new-unit counts
        """
        return {
            f"{vocabulary}/{language}": {
                "units": len(units),
                "new": self._dirty.get((vocabulary, language), 0),
            }
            for (vocabulary, language), units in sorted(self._units.items())
        }
