"""Shared pytest fixtures for Ontolingo tests.

Provides a dummy MT provider, seed/human translation files and test terms.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from typer.testing import CliRunner

from ontolingo.mt.base import BaseMTProvider, MTError, ProviderDescriptor, TranslationResult
from ontolingo.mt.translator import MachineTranslator
from ontolingo.utils import config as config_module
from ontolingo.vocabulary import DictVocabularyTerm, HumanTranslationExtension

VOC_NAME = "dummy"

XLIFF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<xliff version="1.2" xmlns="urn:oasis:names:tc:xliff:document:1.2">
  <file original="{vocabulary}" source-language="en" target-language="{language}" datatype="plaintext">
    <body>
{units}
    </body>
  </file>
</xliff>
"""

UNIT_TEMPLATE = """      <trans-unit id="{id}">
        <source>{source}</source>
        <target>{target}</target>
      </trans-unit>"""


def make_xliff(
    units: list[tuple[str, str, str]], vocabulary: str = VOC_NAME, language: str = "es"
) -> str:
    """Render an XLIFF document from (unit id, source, target) triples."""
    body = "\n".join(
        UNIT_TEMPLATE.format(id=unit_id, source=source, target=target)
        for unit_id, source, target in units
    )
    return XLIFF_TEMPLATE.format(vocabulary=vocabulary, language=language, units=body)


# ============================================================================
# Mock MT Provider Fixtures
# ============================================================================


class DummyMTProvider(BaseMTProvider):
    """Provider prefixing "El " to every text, without API calls."""

    descriptor = ProviderDescriptor(
        identifier="dummy",
        languages=frozenset({"es"}),
        vocabularies=frozenset({VOC_NAME}),
    )

    def __init__(self, fail: bool = False, **kwargs: Any):
        """Initialize dummy provider.

        Args:
            fail: Raise MTError on every call
        """
        super().__init__()
        self.fail = fail
        self.calls: list[str] = []
        self.closed = False

    async def translate(
        self, text: str, target_lang: str, source_lang: str | None = None
    ) -> TranslationResult:
        """Return "El <text>"."""
        self.calls.append(text)
        if self.fail:
            raise MTError("Dummy provider unavailable")
        self.total_characters += len(text)
        return TranslationResult(
            text=f"El {text}",
            source_lang=source_lang or "en",
            target_lang=target_lang,
            characters=len(text),
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider() -> DummyMTProvider:
    """Provide a dummy provider that succeeds."""
    return DummyMTProvider()


def mock_session_returning(status: int, payload: Any = None, text: str = "") -> AsyncMock:
    """Build an aiohttp session mock whose post/get/request yield one response."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=payload)
    mock_response.text = AsyncMock(return_value=text)

    mock_session = AsyncMock()
    mock_session.post = MagicMock(
        return_value=AsyncMock(__aenter__=AsyncMock(return_value=mock_response))
    )
    mock_session.get = MagicMock(
        return_value=AsyncMock(__aenter__=AsyncMock(return_value=mock_response))
    )
    mock_session.request = MagicMock(
        return_value=AsyncMock(__aenter__=AsyncMock(return_value=mock_response))
    )
    mock_session.closed = False
    return mock_session


# ============================================================================
# Translation Resource Fixtures
# ============================================================================


@pytest.fixture
def seeds_dir(tmp_path: Path) -> Path:
    """Provide a seed directory with a memory already knowing DUM:0001."""
    seeds = tmp_path / "seeds"
    seeds.mkdir()
    (seeds / "dummy_dummy_es.xliff").write_text(
        make_xliff([("DUM_0001_name", "Dummy", "El Dummy")]), encoding="utf-8"
    )
    return seeds


@pytest.fixture
def human_dir(tmp_path: Path) -> Path:
    """Provide a human translation resource for the dummy vocabulary."""
    resources = tmp_path / "human"
    resources.mkdir()
    (resources / "dummy_es.xliff").write_text(
        make_xliff(
            [
                ("DUM_0003_label", "Curated", "El Curado"),
                ("DUM_0003_definition", "A curated term.", "Un término curado."),
                ("DUM_0001_label", "Dummy", "El Dummy Humano"),
                ("not-a-term-id", "Ignored", "Ignorado"),
            ]
        ),
        encoding="utf-8",
    )
    return resources


@pytest.fixture
def translations_root(tmp_path: Path) -> Path:
    return tmp_path / "vocabulary_translations"


@pytest.fixture
def translator(
    provider: DummyMTProvider, translations_root: Path, seeds_dir: Path
) -> MachineTranslator:
    """Provide an initialized translator without human translations."""
    mt = MachineTranslator(provider, translations_root, seeds_dir=seeds_dir)
    mt.initialize()
    return mt


@pytest.fixture
def human_translator(
    provider: DummyMTProvider, translations_root: Path, seeds_dir: Path, human_dir: Path
) -> MachineTranslator:
    """Provide an initialized translator consulting human translations."""
    human = HumanTranslationExtension(human_dir, supported_vocabularies=[VOC_NAME])
    mt = MachineTranslator(provider, translations_root, human=human, seeds_dir=seeds_dir)
    mt.initialize()
    return mt


# ============================================================================
# Test Data Fixtures
# ============================================================================


@pytest.fixture
def term1() -> DictVocabularyTerm:
    """Term whose name is already in the seed memory."""
    return DictVocabularyTerm(id="DUM:0001", name="Dummy")


@pytest.fixture
def term2() -> DictVocabularyTerm:
    """Term that is in no cache."""
    return DictVocabularyTerm(id="DUM:0002", name="Whatever")


@pytest.fixture
def term3() -> DictVocabularyTerm:
    """Term with a human translation."""
    return DictVocabularyTerm(id="DUM:0003", name="Curated", **{"def": "A curated term."})


# ============================================================================
# CLI Fixtures
# ============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    """Point settings at a temporary translations root and reset the cache."""
    root = tmp_path / "settings_root"
    monkeypatch.setenv("ONTOLINGO_TRANSLATIONS_ROOT", str(root))
    monkeypatch.setattr(config_module, "_settings", None)
    yield root
    config_module._settings = None


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
