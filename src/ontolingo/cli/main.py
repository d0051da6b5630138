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

"""Main CLI application entry point for Ontolingo.

All commands are organized in separate modules under `ontolingo.cli.commands/`.
"""

from __future__ import annotations

import typer

from ontolingo import __version__
from ontolingo.cli.commands.memory import memory_app
from ontolingo.cli.commands.translate import estimate, translate
from ontolingo.utils.config import get_settings
from ontolingo.utils.console import console, setup_logging

# Create main app
app = typer.Typer(
    name="ontolingo",
    help="Ontolingo - tiered translation of ontology vocabulary terms",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Register commands
app.command()(translate)
app.command()(estimate)

# Add sub-apps for grouped commands
app.add_typer(memory_app, name="memory")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Ontolingo version: [bold cyan]{__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: ARG001 - Used by Typer callback
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    debug: bool = typer.Option(False, "--debug", help="Log every resolved field"),
) -> None:
    """Ontolingo - tiered translation of ontology vocabulary terms."""
    setup_logging("DEBUG" if debug else get_settings().log_level)


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
