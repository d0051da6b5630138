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

"""Vocabulary term access used by translation.

Translation only needs to read source fields and write language-suffixed
target fields, so terms are consumed through a small protocol.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# Field names of the indexed term document
ID = "id"
NAME = "name"
DEF = "def"


@runtime_checkable
class VocabularyTerm(Protocol):
    """Read/write surface of a term being indexed."""

    @property
    def id(self) -> str: ...

    def get(self, field: str) -> Any: ...

    def set(self, field: str, value: Any) -> Any: ...


def target_field(field: str, language: str) -> str:
    """Name of the field holding the translation of ``field``.

    Example:
        >>> target_field("name", "es")
        'name_es'
    """
    return f"{field}_{language}"


class DictVocabularyTerm:
    """Term backed by a plain document dictionary.

    Example:
        >>> term = DictVocabularyTerm({"id": "HP:0000118", "name": "Phenotypic abnormality"})
        >>> term.set("name_es", "Anomalía fenotípica").get("name_es")
        'Anomalía fenotípica'
    """

    def __init__(self, doc: dict[str, Any] | None = None, **fields: Any):
        self.doc: dict[str, Any] = dict(doc or {})
        self.doc.update(fields)

    @property
    def id(self) -> str:
        return str(self.doc.get(ID, ""))

    def get(self, field: str) -> Any:
        return self.doc.get(field)

    def set(self, field: str, value: Any) -> DictVocabularyTerm:
        self.doc[field] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        return dict(self.doc)

    def __repr__(self) -> str:
        return f"DictVocabularyTerm(id={self.id!r})"
