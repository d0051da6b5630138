"""Translation Memory for machine translated vocabulary terms.

Provides XLIFF-backed storage for:
- Translation units: cached translations of (term, field) pairs
- Translation Memory: per vocabulary/language load-unload lifecycle
"""

from .tm import TranslationMemory, VocabularyNotLoadedError
from .xliff import (
    TranslationMemoryError,
    TranslationUnit,
    format_unit_id,
    parse_unit_id,
    read_units,
    write_units,
)

__all__ = [
    "TranslationMemory",
    "TranslationMemoryError",
    "TranslationUnit",
    "VocabularyNotLoadedError",
    "format_unit_id",
    "parse_unit_id",
    "read_units",
    "write_units",
]
