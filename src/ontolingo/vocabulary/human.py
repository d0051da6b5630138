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

"""Human translations of vocabulary terms.

Curated bilingual XLIFF resources (``{vocabulary}_{language}.xliff``) are
streamed into an in-memory table at the start of every indexing pass and
written straight onto the indexed terms. Human translations are never copied
into the machine Translation Memory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

import defusedxml.ElementTree as ET  # noqa: N817
from defusedxml import DefusedXmlException

from ontolingo.memory.xliff import local_name, parse_unit_id

from .term import DEF, NAME, VocabularyTerm, target_field

logger = logging.getLogger(__name__)

HUMAN_RESOURCES_DIR = Path(__file__).parent.parent / "resources" / "human"

TRANSLATION_UNIT = "trans-unit"
TARGET = "target"
ID = "id"

LABEL = "label"
DEFINITION = "definition"

# Term field -> attribute name used in the curated resources
FIELD_ATTRIBUTES = {NAME: LABEL, DEF: DEFINITION}

CHUNK_SIZE = 64 * 1024

HumanTranslationTable = dict[str, dict[str, str]]


class HumanTranslationError(Exception):
    """Raised when a human translation resource is malformed."""


class ParserState(str, Enum):
    """States of the translation unit automaton."""

    IDLE = "idle"
    IN_UNIT = "in_unit"
    IN_TARGET = "in_target"


class HumanTranslationParser:
    """Streaming parser target building a HumanTranslationTable.

    Implements the ElementTree parser target interface. Transitions:

        IDLE --trans-unit(id matches)--> IN_UNIT --target--> IN_TARGET
        IN_TARGET --/target--> IN_UNIT --/trans-unit--> IDLE

    Units whose id does not match ``{PREFIX}_{digits}_{attribute}`` never
    leave IDLE, so they produce no table entry.
    """

    def __init__(self) -> None:
        self.state = ParserState.IDLE
        self.translations: HumanTranslationTable = {}
        self.current_term: str | None = None
        self.current_attr: str | None = None
        self._buffer: list[str] = []

    def start(self, tag: str, attrs: dict[str, str]) -> None:
        name = local_name(tag)
        if self.state is ParserState.IDLE and name == TRANSLATION_UNIT:
            key = parse_unit_id(attrs.get(ID, ""))
            if key is None:
                logger.debug(f"Skipping unit with unexpected id {attrs.get(ID)!r}")
                return
            self.current_term, self.current_attr = key
            self.state = ParserState.IN_UNIT
        elif self.state is ParserState.IN_UNIT and name == TARGET:
            self._buffer = []
            self.state = ParserState.IN_TARGET

    def data(self, text: str) -> None:
        if self.state is ParserState.IN_TARGET:
            self._buffer.append(text)

    def end(self, tag: str) -> None:
        name = local_name(tag)
        if self.state is ParserState.IN_TARGET and name == TARGET:
            entry = self.translations.setdefault(str(self.current_term), {})
            entry[str(self.current_attr)] = "".join(self._buffer)
            self._buffer = []
            self.state = ParserState.IN_UNIT
        elif self.state is ParserState.IN_UNIT and name == TRANSLATION_UNIT:
            self.current_term = None
            self.current_attr = None
            self.state = ParserState.IDLE

    def close(self) -> HumanTranslationTable:
        return self.translations


def load_human_translations(path: Path) -> HumanTranslationTable:
    """Stream a curated XLIFF resource into a translation table.

    Args:
        path: Resource file

    Returns:
        Mapping of term id to {attribute: translated text}

    Raises:
        FileNotFoundError: If the resource does not exist
        HumanTranslationError: If the resource is not well-formed XML
    """
    handler = HumanTranslationParser()
    parser = ET.XMLParser(target=handler)
    try:
        with open(path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                parser.feed(chunk)
        table: HumanTranslationTable = parser.close()
    except (ET.ParseError, DefusedXmlException) as e:
        raise HumanTranslationError(f"Malformed human translation resource {path}: {e}") from e

    logger.info(f"Loaded human translations for {len(table)} terms from {path.name}")
    return table


class HumanTranslationExtension:
    """Indexing extension applying curated human translations.

    Tables are built by ``indexing_started`` and discarded by
    ``indexing_ended``; in between they are read-only.

    Example:
        >>> extension = HumanTranslationExtension()
        >>> extension.indexing_started("hpo", "es")
        >>> extension.extend_term(term, "hpo", "es")
        >>> extension.indexing_ended("hpo", "es")
    """

    def __init__(
        self,
        resources_dir: str | Path | None = None,
        supported_vocabularies: Iterable[str] = ("hpo",),
    ):
        """Initialize the extension.

        Args:
            resources_dir: Directory with ``{vocabulary}_{language}.xliff`` files.
                           Defaults to the bundled resources.
            supported_vocabularies: Vocabularies this extension applies to
        """
        self.resources_dir = Path(resources_dir) if resources_dir else HUMAN_RESOURCES_DIR
        self.supported_vocabularies = frozenset(supported_vocabularies)
        self._tables: dict[tuple[str, str], HumanTranslationTable] = {}

    def resource_path(self, vocabulary: str, language: str) -> Path:
        return self.resources_dir / f"{vocabulary}_{language}.xliff"

    def supports(self, vocabulary: str) -> bool:
        return vocabulary in self.supported_vocabularies

    def indexing_started(self, vocabulary: str, language: str) -> None:
        """Parse the human translations for a vocabulary and language.

        A missing resource leaves the table empty.

        Raises:
            HumanTranslationError: If the resource is malformed
        """
        if not self.supports(vocabulary):
            return

        path = self.resource_path(vocabulary, language)
        try:
            table = load_human_translations(path)
        except FileNotFoundError:
            logger.warning(f"No human translations for {vocabulary}/{language} at {path}")
            table = {}
        self._tables[(vocabulary, language)] = table

    def indexing_ended(self, vocabulary: str, language: str) -> None:
        self._tables.pop((vocabulary, language), None)

    def extend_term(self, term: VocabularyTerm, vocabulary: str, language: str) -> None:
        """Write the human label and definition of a term onto it."""
        translated = self._tables.get((vocabulary, language), {}).get(term.id)
        if not translated:
            return

        label = translated.get(LABEL)
        definition = translated.get(DEFINITION)
        if label is not None:
            term.set(target_field(NAME, language), label)
        if definition is not None:
            term.set(target_field(DEF, language), definition)

    def has_table(self, vocabulary: str, language: str) -> bool:
        return (vocabulary, language) in self._tables

    def lookup(self, vocabulary: str, language: str, term_id: str, field: str) -> str | None:
        """Get the human translation of a term field, if any."""
        translated = self._tables.get((vocabulary, language), {}).get(term_id)
        if not translated:
            return None
        attribute = FIELD_ATTRIBUTES.get(field, field)
        if attribute in translated:
            return translated[attribute]
        return translated.get(field)
