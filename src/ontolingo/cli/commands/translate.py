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

"""Translate and estimate commands for vocabulary term files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ontolingo.cli.utils import create_provider, create_translator, load_terms, write_terms
from ontolingo.mt import MachineTranslator, MTError, UnsupportedFieldError, UnsupportedTermError
from ontolingo.utils.config import get_settings
from ontolingo.utils.console import console, print_error, print_success, print_warning
from ontolingo.vocabulary import DictVocabularyTerm

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = ["name", "def"]

# Errors that fail a single term without stopping the pass
TERM_ERRORS = (MTError, UnsupportedFieldError, UnsupportedTermError)

TERMS_FILE_HELP = "JSON Lines file with one term document per line"


async def _translate_term(
    translator: MachineTranslator,
    term: DictVocabularyTerm,
    vocabulary: str,
    language: str,
    fields: list[str],
    semaphore: asyncio.Semaphore,
) -> int:
    async with semaphore:
        if translator.human is not None:
            translator.human.extend_term(term, vocabulary, language)
        return await translator.translate(vocabulary, term, fields, language)


async def _translate_async(
    terms_file: Path,
    vocabulary: str,
    language: str,
    fields: list[str],
    output: Path,
    provider: str | None,
    demo: bool,
    verbose: bool,
) -> None:
    """Run one indexing pass over a term file."""
    settings = get_settings()
    terms = load_terms(terms_file)
    translator = create_translator(
        create_provider(provider, settings, demo, verbose), settings, isolated=demo
    )
    human = translator.human

    failures: list[tuple[str, BaseException]] = []
    unexpected: BaseException | None = None
    total = 0
    try:
        cached = await translator.load_vocabulary(vocabulary, language)
        if verbose:
            console.print(f"[dim]{cached} cached translations for {vocabulary}/{language}[/dim]")
        if human is not None:
            human.indexing_started(vocabulary, language)

        semaphore = asyncio.Semaphore(settings.max_concurrency)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Translating terms", total=len(terms))

            async def run(term: DictVocabularyTerm) -> int:
                try:
                    return await _translate_term(
                        translator, term, vocabulary, language, fields, semaphore
                    )
                finally:
                    progress.advance(task_id)

            results = await asyncio.gather(*[run(term) for term in terms], return_exceptions=True)

        for term, result in zip(terms, results):
            if isinstance(result, TERM_ERRORS):
                logger.warning(f"Could not translate {term.id}: {result}")
                failures.append((term.id, result))
            elif isinstance(result, BaseException):
                unexpected = unexpected or result
            else:
                total += result

        if human is not None:
            human.indexing_ended(vocabulary, language)
        await translator.unload_vocabulary(vocabulary, language)
    finally:
        await translator.close()

    # Raised only after unload, so completed translations are kept
    if unexpected is not None:
        raise unexpected

    write_terms(terms, output)

    table = Table(title="Translation summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Terms", str(len(terms)))
    table.add_row("Characters sent to provider", str(total))
    table.add_row("Failed terms", str(len(failures)))
    console.print(table)

    for term_id, error in failures:
        print_warning(f"{term_id}: {error}")
    print_success(f"Translated terms written to {output}")


def translate(
    terms_file: Path = typer.Argument(..., help=TERMS_FILE_HELP),
    vocabulary: str = typer.Option("hpo", "--vocabulary", "-v", help="Vocabulary name"),
    language: str | None = typer.Option(None, "--language", "-l", help="Target language"),
    field: list[str] | None = typer.Option(None, "--field", "-f", help="Field to translate"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output JSON Lines file"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="deepl or microsoft"),
    demo: bool = typer.Option(False, "--demo", help="Copy source text instead of calling APIs"),
    verbose: bool = typer.Option(False, "--verbose", help="Show verbose output"),
) -> None:
    """Translate term fields using human translations, memory and MT.

    Example:
        ontolingo translate hpo_terms.jsonl --language es --output hpo_terms.es.jsonl
    """
    language = language or get_settings().default_language
    output = output or terms_file.with_suffix(f".{language}.jsonl")
    try:
        asyncio.run(
            _translate_async(
                terms_file,
                vocabulary,
                language,
                field or DEFAULT_FIELDS,
                output,
                provider,
                demo,
                verbose,
            )
        )
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


async def _estimate_async(
    terms_file: Path,
    vocabulary: str,
    language: str,
    fields: list[str],
    provider: str | None,
) -> int:
    settings = get_settings()
    terms = load_terms(terms_file)
    # The provider is never called, only its memory is read
    stand_in = create_provider(provider, settings, demo=True)
    translator = create_translator(stand_in, settings, isolated=False)
    human = translator.human

    try:
        await translator.load_vocabulary(vocabulary, language)
        if human is not None:
            human.indexing_started(vocabulary, language)
        total = 0
        for term in terms:
            total += await translator.get_missing_characters(vocabulary, term, fields, language)
        if human is not None:
            human.indexing_ended(vocabulary, language)
        await translator.discard_vocabulary(vocabulary, language)
    finally:
        await translator.close()
    return total


def estimate(
    terms_file: Path = typer.Argument(..., help=TERMS_FILE_HELP),
    vocabulary: str = typer.Option("hpo", "--vocabulary", "-v", help="Vocabulary name"),
    language: str | None = typer.Option(None, "--language", "-l", help="Target language"),
    field: list[str] | None = typer.Option(None, "--field", "-f", help="Field to translate"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="deepl or microsoft"),
) -> None:
    """Count characters a translation run would send to the provider.

    Nothing is translated and no memory is modified.

    Example:
        ontolingo estimate hpo_terms.jsonl --language es
    """
    language = language or get_settings().default_language
    try:
        total = asyncio.run(
            _estimate_async(terms_file, vocabulary, language, field or DEFAULT_FIELDS, provider)
        )
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    console.print(
        f"[bold]{total}[/bold] characters missing for {vocabulary}/{language} "
        f"in {terms_file.name}"
    )
