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

"""XLIFF unit store for machine translation memory files.

Reads and writes the bilingual unit table persisted for every
provider/vocabulary/language triple:

    ```xml
    <?xml version="1.0" encoding="UTF-8"?>
    <xliff version="1.2" xmlns="urn:oasis:names:tc:xliff:document:1.2">
      <file original="hpo" source-language="en" target-language="es" datatype="plaintext">
        <body>
          <trans-unit id="HP_0000118_name">
            <source>Phenotypic abnormality</source>
            <target>Anomalía fenotípica</target>
          </trans-unit>
        </body>
      </file>
    </xliff>
    ```

Unit ids follow ``{PREFIX}_{numericId}_{field}`` and map to the
``(PREFIX:numericId, field)`` key used in memory.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ElementTree
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import defusedxml.ElementTree as ET  # noqa: N817
from defusedxml import DefusedXmlException
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

XLIFF_NAMESPACE = "urn:oasis:names:tc:xliff:document:1.2"
SOURCE_LANGUAGE = "en"

# HP_0000118_name -> ("HP", "0000118", "name")
UNIT_ID_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9]*)_(\d+)_(.+)$")
TERM_ID_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9]*):(\d+)$")

# Anything outside the XML 1.0 Char production makes the whole file unreadable
NON_XML_CHARACTER = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

UnitKey = tuple[str, str]


def is_storable_term_id(term_id: str) -> bool:
    """Whether ``term_id`` survives a round trip through the unit id format."""
    return TERM_ID_PATTERN.match(term_id) is not None


def is_storable_text(text: str) -> bool:
    """Whether ``text`` can be written to an XLIFF file."""
    return NON_XML_CHARACTER.search(text) is None


class TranslationMemoryError(RuntimeError):
    """Raised when a translation memory file cannot be read or written."""


class TranslationUnit(BaseModel):
    """A single cached translation of one term field."""

    term_id: str = Field(..., description="Canonical term id, e.g. HP:0000118")
    field: str = Field(..., description="Source field name, e.g. name", min_length=1)
    source_text: str = Field(..., description="Text submitted for translation")
    target_text: str = Field(..., description="Translated text")

    @field_validator("term_id")
    @classmethod
    def _check_term_id(cls, value: str) -> str:
        # Only PREFIX:digits ids survive a round trip through the unit id format
        if not is_storable_term_id(value):
            raise ValueError(f"Term id {value!r} cannot be stored, expected PREFIX:digits")
        return value

    @field_validator("source_text", "target_text")
    @classmethod
    def _check_text(cls, value: str) -> str:
        if not is_storable_text(value):
            raise ValueError(f"Text {value!r} contains characters not allowed in XML")
        # XML parsers turn \r\n and \r into \n, so store what a reload returns
        return value.replace("\r\n", "\n").replace("\r", "\n")

    @property
    def key(self) -> UnitKey:
        return (self.term_id, self.field)

    @property
    def unit_id(self) -> str:
        return format_unit_id(self.term_id, self.field)


def parse_unit_id(unit_id: str) -> UnitKey | None:
    """Split a persisted unit id into ``(term_id, field)``.

    Args:
        unit_id: Value of a ``trans-unit`` id attribute

    Returns:
        The key, or None if the id does not follow ``{PREFIX}_{digits}_{field}``

    Example:
        >>> parse_unit_id("HP_0000118_name")
        ('HP:0000118', 'name')
    """
    match = UNIT_ID_PATTERN.match(unit_id)
    if match is None:
        return None
    prefix, number, field = match.groups()
    return f"{prefix}:{number}", field


def format_unit_id(term_id: str, field: str) -> str:
    """Render ``(term_id, field)`` as a persisted unit id.

    Raises:
        ValueError: If the term id is not of the form ``PREFIX:digits``
    """
    match = TERM_ID_PATTERN.match(term_id)
    if match is None:
        raise ValueError(f"Term id {term_id!r} cannot be stored, expected PREFIX:digits")
    prefix, number = match.groups()
    return f"{prefix}_{number}_{field}"


def local_name(tag: str) -> str:
    """Strip an ElementTree ``{namespace}`` prefix from a tag."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: Any, name: str) -> str | None:
    for child in element:
        if local_name(child.tag) == name:
            return "".join(child.itertext())
    return None


def _strip_namespaces(element: Any) -> ElementTree.Element:
    copy = ElementTree.Element(local_name(element.tag), dict(element.attrib))
    copy.text = element.text
    copy.tail = element.tail
    copy.extend(_strip_namespaces(child) for child in element)
    return copy


def _keep(skipped: list[Any] | None, element: Any) -> None:
    if skipped is not None:
        skipped.append(_strip_namespaces(element))


def read_units(path: Path, skipped: list[Any] | None = None) -> dict[UnitKey, TranslationUnit]:
    """Load every well-formed unit from an XLIFF memory file.

    Args:
        path: File to read
        skipped: Receives the ``trans-unit`` elements that could not be read,
                 with namespaces stripped, so they can be written back as is

    Returns:
        Units keyed by ``(term_id, field)``

    Raises:
        TranslationMemoryError: If the file is not valid XML or cannot be read
    """
    try:
        tree = ET.parse(path)
    except (ET.ParseError, DefusedXmlException) as e:
        logger.error(f"Could not load {path}: {e}")
        raise TranslationMemoryError(f"Invalid translation memory file {path}: {e}") from e
    except OSError as e:
        logger.error(f"Could not load {path}: {e}")
        raise TranslationMemoryError(f"Could not read {path}: {e}") from e

    units: dict[UnitKey, TranslationUnit] = {}
    for element in tree.getroot().iter():
        if local_name(element.tag) != "trans-unit":
            continue

        unit_id = element.get("id", "")
        key = parse_unit_id(unit_id)
        if key is None:
            logger.warning(f"Skipping unit with unexpected id {unit_id!r} in {path.name}")
            _keep(skipped, element)
            continue

        source = _child_text(element, "source")
        target = _child_text(element, "target")
        if source is None or target is None:
            logger.warning(f"Skipping incomplete unit {unit_id!r} in {path.name}")
            _keep(skipped, element)
            continue

        term_id, field = key
        units[key] = TranslationUnit(
            term_id=term_id, field=field, source_text=source, target_text=target
        )

    logger.debug(f"Read {len(units)} units from {path}")
    return units


def _build_document(
    units: dict[UnitKey, TranslationUnit],
    vocabulary: str,
    language: str,
    skipped: Iterable[Any] = (),
) -> ElementTree.ElementTree:
    root = ElementTree.Element("xliff", {"version": "1.2", "xmlns": XLIFF_NAMESPACE})
    file_element = ElementTree.SubElement(
        root,
        "file",
        {
            "original": vocabulary,
            "source-language": SOURCE_LANGUAGE,
            "target-language": language,
            "datatype": "plaintext",
        },
    )
    body = ElementTree.SubElement(file_element, "body")

    for unit in sorted(units.values(), key=lambda u: u.unit_id):
        trans_unit = ElementTree.SubElement(body, "trans-unit", {"id": unit.unit_id})
        ElementTree.SubElement(trans_unit, "source").text = unit.source_text
        ElementTree.SubElement(trans_unit, "target").text = unit.target_text

    for element in skipped:
        # A unit stored since load replaces an unreadable one with the same id
        if parse_unit_id(element.get("id", "")) not in units:
            body.append(element)

    tree = ElementTree.ElementTree(root)
    ElementTree.indent(tree)
    return tree


def write_units(
    path: Path,
    units: dict[UnitKey, TranslationUnit],
    vocabulary: str,
    language: str,
    skipped: Iterable[Any] = (),
) -> None:
    """Atomically replace ``path`` with the given units.

    ``skipped`` elements collected by ``read_units`` are written after the
    units, so a load and unload never loses data it could not read.

    The document is written to a temporary file next to ``path`` and moved
    into place, so the previous file survives any failure mid-write.

    Raises:
        TranslationMemoryError: If the file cannot be written
    """
    tree = _build_document(units, vocabulary, language, skipped)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        logger.error(f"Threw on writing {path}: {e}")
        raise TranslationMemoryError(f"Could not write {path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            tree.write(f, encoding="UTF-8", xml_declaration=True)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        logger.error(f"Threw on writing {path}: {e}")
        raise TranslationMemoryError(f"Could not write {path}: {e}") from e

    logger.debug(f"Wrote {len(units)} units to {path}")
