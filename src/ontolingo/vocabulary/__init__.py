"""Vocabulary term access and human translation resources."""

from .human import (
    HumanTranslationError,
    HumanTranslationExtension,
    HumanTranslationParser,
    ParserState,
    load_human_translations,
)
from .term import DictVocabularyTerm, VocabularyTerm, target_field

__all__ = [
    "DictVocabularyTerm",
    "HumanTranslationError",
    "HumanTranslationExtension",
    "HumanTranslationParser",
    "ParserState",
    "VocabularyTerm",
    "load_human_translations",
    "target_field",
]
