"""
Ontolingo - tiered translation of ontology vocabulary terms.

Supplies translated term names and definitions while indexing a vocabulary,
from curated human translations, a persistent translation memory of earlier
machine translations, and live machine translation providers.
"""

__version__ = "0.1.0"

from ontolingo.memory import TranslationMemory, TranslationUnit, VocabularyNotLoadedError
from ontolingo.mt import MachineTranslator, MTError, UnsupportedFieldError
from ontolingo.vocabulary import DictVocabularyTerm, HumanTranslationExtension

__all__ = [
    "DictVocabularyTerm",
    "HumanTranslationExtension",
    "MTError",
    "MachineTranslator",
    "TranslationMemory",
    "TranslationUnit",
    "UnsupportedFieldError",
    "VocabularyNotLoadedError",
    "__version__",
]
