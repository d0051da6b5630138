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

"""Tests for the ontolingo command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ontolingo import __version__
from ontolingo.cli.commands import translate as translate_command
from ontolingo.cli.demo import DemoMTProvider
from ontolingo.cli.main import app
from ontolingo.cli.utils import create_provider, load_terms, write_terms
from ontolingo.memory import read_units
from ontolingo.mt import DeepLProvider, MicrosoftProvider
from ontolingo.utils.config import Settings

TERMS = [
    {"id": "HP:0000707", "name": "Abnormality of the nervous system"},
    {"id": "HP:0001250", "name": "Seizure"},
    {"id": "HP:0012345", "name": "Brand new"},
]


@pytest.fixture
def terms_file(tmp_path: Path) -> Path:
    path = tmp_path / "hpo_terms.jsonl"
    path.write_text("\n".join(json.dumps(doc) for doc in TERMS) + "\n", encoding="utf-8")
    return path


def read_jsonl(path: Path) -> dict[str, dict]:
    docs = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    return {doc["id"]: doc for doc in docs}


class TestMainApp:
    """Test top level options."""

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "translate" in result.stdout
        assert "estimate" in result.stdout
        assert "memory" in result.stdout


class TestMemoryCommands:
    """Test the memory sub-commands."""

    def test_bootstrap(self, cli_runner: CliRunner, isolated_settings: Path) -> None:
        result = cli_runner.invoke(app, ["memory", "bootstrap", "--provider", "microsoft"])

        assert result.exit_code == 0
        assert (isolated_settings / "microsoft" / "microsoft_hpo_es.xliff").exists()

    def test_bootstrap_unknown_provider(
        self, cli_runner: CliRunner, isolated_settings: Path
    ) -> None:
        result = cli_runner.invoke(app, ["memory", "bootstrap", "--provider", "babelfish"])

        assert result.exit_code == 1
        assert "Unknown provider" in result.stdout

    def test_stats(self, cli_runner: CliRunner, isolated_settings: Path) -> None:
        cli_runner.invoke(app, ["memory", "bootstrap", "--provider", "deepl"])

        result = cli_runner.invoke(
            app, ["memory", "stats", "--provider", "deepl", "--language", "fr"]
        )

        assert result.exit_code == 0
        assert "3 translations for 3 terms" in result.stdout

    def test_stats_missing_memory(self, cli_runner: CliRunner, isolated_settings: Path) -> None:
        result = cli_runner.invoke(app, ["memory", "stats", "--provider", "deepl"])

        assert result.exit_code == 1
        assert "No translation memory" in result.stdout


class TestTranslateCommand:
    """Test translate in demo mode."""

    def test_translate_demo(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "out.jsonl"

        result = cli_runner.invoke(
            app, ["translate", str(terms_file), "--demo", "--output", str(output)]
        )

        assert result.exit_code == 0, result.stdout
        docs = read_jsonl(output)
        # Seed memory, human translation and (demo) machine translation
        assert docs["HP:0000707"]["name_es"] == "Anomalía del sistema nervioso"
        assert docs["HP:0001250"]["name_es"] == "Convulsión"
        assert docs["HP:0012345"]["name_es"] == "Brand new"
        assert "def_es" not in docs["HP:0012345"]

        # Demo output only lands in the isolated demo memory
        demo_memory = isolated_settings / "demo" / "deepl" / "deepl_hpo_es.xliff"
        assert ("HP:0012345", "name") in read_units(demo_memory)
        assert not (isolated_settings / "deepl").exists()

    def test_translate_default_output(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path
    ) -> None:
        result = cli_runner.invoke(app, ["translate", str(terms_file), "--demo"])

        assert result.exit_code == 0, result.stdout
        assert terms_file.with_suffix(".es.jsonl").exists()

    def test_translate_unsupported_language(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path
    ) -> None:
        result = cli_runner.invoke(
            app, ["translate", str(terms_file), "--demo", "--provider", "microsoft", "-l", "fr"]
        )

        assert result.exit_code == 1
        assert "does not translate" in result.stdout

    def test_translate_missing_file(
        self, cli_runner: CliRunner, isolated_settings: Path, tmp_path: Path
    ) -> None:
        result = cli_runner.invoke(app, ["translate", str(tmp_path / "nope.jsonl"), "--demo"])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_unstorable_term_id_fails_only_that_term(
        self, cli_runner: CliRunner, isolated_settings: Path, tmp_path: Path
    ) -> None:
        terms_path = tmp_path / "terms.jsonl"
        docs = [*TERMS, {"id": "bad-id", "name": "Odd"}]
        terms_path.write_text("\n".join(json.dumps(doc) for doc in docs), encoding="utf-8")
        output = tmp_path / "out.jsonl"

        result = cli_runner.invoke(
            app, ["translate", str(terms_path), "--demo", "--output", str(output)]
        )

        assert result.exit_code == 0, result.stdout
        assert "bad-id" in result.stdout
        written = read_jsonl(output)
        assert "name_es" not in written["bad-id"]
        assert written["HP:0012345"]["name_es"] == "Brand new"
        demo_memory = isolated_settings / "demo" / "deepl" / "deepl_hpo_es.xliff"
        assert ("HP:0012345", "name") in read_units(demo_memory)

    def test_unexpected_error_still_persists_memory(
        self,
        cli_runner: CliRunner,
        isolated_settings: Path,
        terms_file: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        original = translate_command._translate_term

        async def broken_for_one_term(translator, term, *args):  # type: ignore[no-untyped-def]
            if term.id == "HP:0000707":
                raise RuntimeError("indexer crashed")
            return await original(translator, term, *args)

        monkeypatch.setattr(translate_command, "_translate_term", broken_for_one_term)
        output = tmp_path / "out.jsonl"

        result = cli_runner.invoke(
            app, ["translate", str(terms_file), "--demo", "--output", str(output)]
        )

        assert result.exit_code == 1
        assert "indexer crashed" in result.stdout
        assert not output.exists()
        demo_memory = isolated_settings / "demo" / "deepl" / "deepl_hpo_es.xliff"
        assert ("HP:0012345", "name") in read_units(demo_memory)


class TestEstimateCommand:
    """Test estimate."""

    def test_estimate(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path
    ) -> None:
        result = cli_runner.invoke(app, ["estimate", str(terms_file), "--field", "name"])

        assert result.exit_code == 0, result.stdout
        assert "9 characters missing for hpo/es" in result.stdout

    def test_estimate_after_translate(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path, tmp_path: Path
    ) -> None:
        """Test demo runs never reduce the estimate for the real provider."""
        cli_runner.invoke(
            app, ["translate", str(terms_file), "--demo", "-o", str(tmp_path / "o.jsonl")]
        )

        result = cli_runner.invoke(app, ["estimate", str(terms_file), "--field", "name"])

        assert "9 characters missing" in result.stdout

    def test_estimate_leaves_memory_file_untouched(
        self, cli_runner: CliRunner, isolated_settings: Path, terms_file: Path
    ) -> None:
        cli_runner.invoke(app, ["memory", "bootstrap", "--provider", "deepl"])
        memory = isolated_settings / "deepl" / "deepl_hpo_es.xliff"
        # A unit no reader understands must not be dropped by an estimate
        memory.write_text(
            memory.read_text(encoding="utf-8").replace(
                "</body>",
                '<trans-unit id="HP_0000118"><source>Orphan</source></trans-unit>\n    </body>',
            ),
            encoding="utf-8",
        )
        before = memory.read_bytes()

        result = cli_runner.invoke(app, ["estimate", str(terms_file), "--field", "name"])

        assert result.exit_code == 0, result.stdout
        assert memory.read_bytes() == before


class TestCliUtils:
    """Test shared CLI helpers."""

    def test_create_provider_demo(self) -> None:
        provider = create_provider("microsoft", Settings(), demo=True)

        assert isinstance(provider, DemoMTProvider)
        assert provider.identifier == "microsoft"

    def test_create_provider_real(self) -> None:
        settings = Settings(deepl_api_key="dk", microsoft_api_key="mk", microsoft_region="eu")

        assert isinstance(create_provider("deepl", settings), DeepLProvider)
        microsoft = create_provider("microsoft", settings)
        assert isinstance(microsoft, MicrosoftProvider)
        assert microsoft.region == "eu"

    def test_create_provider_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown"):
            create_provider("babelfish", Settings(), demo=True)

    def test_load_and_write_terms(self, tmp_path: Path, terms_file: Path) -> None:
        terms = load_terms(terms_file)
        terms[0].set("name_es", "Anomalía")

        output = tmp_path / "nested" / "out.jsonl"
        write_terms(terms, output)

        assert [t.id for t in load_terms(output)] == [doc["id"] for doc in TERMS]
        assert "Anomalía" in output.read_text(encoding="utf-8")

    def test_load_terms_invalid(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.jsonl"
        path.write_text('{"name": "no id"}\n', encoding="utf-8")

        with pytest.raises(ValueError, match="bad.jsonl:1"):
            load_terms(path)

    @pytest.mark.asyncio
    async def test_demo_provider_copies_text(self) -> None:
        provider = DemoMTProvider(DeepLProvider.descriptor)

        result = await provider.translate("All", target_lang="es", source_lang="en")

        assert provider.identifier == "deepl"
        assert result.text == "All"
        assert provider.call_count == 1
        assert provider.total_characters == 3
