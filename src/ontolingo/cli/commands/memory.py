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

"""Translation memory management CLI commands."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import typer
from rich.table import Table

from ontolingo.cli.utils import PROVIDERS
from ontolingo.memory import read_units
from ontolingo.mt import BootstrapError, bootstrap_provider_home
from ontolingo.mt.bootstrap import memory_file_name
from ontolingo.utils.config import get_settings
from ontolingo.utils.console import console, print_error, print_success

PROVIDER_HELP = "Provider name (deepl, microsoft)"

memory_app = typer.Typer(
    name="memory",
    help="Manage machine translation memories",
    no_args_is_help=True,
)


def _resolve_provider(provider: str | None) -> str:
    name = provider or get_settings().default_provider
    if name not in PROVIDERS:
        print_error(f"Unknown provider: {name}. Available: {', '.join(sorted(PROVIDERS))}")
        raise typer.Exit(code=1)
    return name


@memory_app.command("bootstrap")
def bootstrap(
    provider: str | None = typer.Option(None, "--provider", "-p", help=PROVIDER_HELP),
) -> None:
    """Install the bundled seed memories of a provider.

    Does nothing if the provider directory already exists.

    Example:
        ontolingo memory bootstrap --provider microsoft
    """
    name = _resolve_provider(provider)
    root = Path(get_settings().translations_root).expanduser()
    try:
        home = bootstrap_provider_home(PROVIDERS[name].descriptor, root)
    except BootstrapError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"{name} translation memories in {home}")


@memory_app.command("stats")
def stats(
    vocabulary: str = typer.Option("hpo", "--vocabulary", "-v", help="Vocabulary name"),
    language: str | None = typer.Option(None, "--language", "-l", help="Target language"),
    provider: str | None = typer.Option(None, "--provider", "-p", help=PROVIDER_HELP),
) -> None:
    """Show how many translations a memory file holds per field.

    Example:
        ontolingo memory stats --vocabulary hpo --language es
    """
    settings = get_settings()
    name = _resolve_provider(provider)
    language = language or settings.default_language
    path = (
        Path(settings.translations_root).expanduser()
        / name
        / memory_file_name(name, vocabulary, language)
    )

    if not path.exists():
        print_error(f"No translation memory at {path}")
        raise typer.Exit(code=1)

    try:
        units = read_units(path)
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    per_field = Counter(field for _, field in units)
    terms = {term_id for term_id, _ in units}

    table = Table(title=f"{name} {vocabulary}/{language}", show_lines=False)
    table.add_column("Field", style="cyan")
    table.add_column("Translations", style="yellow", justify="right")
    for field, count in sorted(per_field.items()):
        table.add_row(field, str(count))
    console.print(table)
    console.print(f"\n[dim]{len(units)} translations for {len(terms)} terms in {path}[/dim]")
