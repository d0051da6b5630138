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

"""Shared helpers for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ontolingo.mt import BaseMTProvider, DeepLProvider, MachineTranslator, MicrosoftProvider
from ontolingo.utils.config import Settings
from ontolingo.utils.console import console
from ontolingo.vocabulary import DictVocabularyTerm, HumanTranslationExtension

PROVIDERS: dict[str, type[BaseMTProvider]] = {
    "deepl": DeepLProvider,
    "microsoft": MicrosoftProvider,
}


def create_provider(
    provider: str | None, settings: Settings, demo: bool = False, verbose: bool = False
) -> BaseMTProvider:
    """Create a machine translation provider from settings.

    Args:
        provider: Provider name (deepl/microsoft) or None for the default
        settings: Application settings
        demo: Return text unchanged instead of calling the provider API
        verbose: Whether to show verbose output

    Returns:
        Configured provider instance

    Raises:
        ValueError: If the provider is unknown or has no credentials
    """
    from ontolingo.cli.demo import DemoMTProvider

    provider_name = provider or settings.default_provider
    if provider_name not in PROVIDERS:
        raise ValueError(
            f"Unknown machine translation provider: {provider_name}. "
            f"Available: {', '.join(sorted(PROVIDERS))}"
        )

    if demo:
        if verbose:
            console.print("[yellow]Demo mode: source text is copied, no API calls[/yellow]")
        return DemoMTProvider(PROVIDERS[provider_name].descriptor)

    credentials = settings.get_provider_credentials(provider_name)
    if provider_name == "deepl":
        return DeepLProvider(
            api_key=credentials["api_key"],
            use_free_api=settings.deepl_use_free_api,
            timeout=settings.request_timeout,
        )
    return MicrosoftProvider(
        api_key=credentials["api_key"],
        region=credentials.get("region"),
        timeout=settings.request_timeout,
    )


def create_translator(
    provider: BaseMTProvider,
    settings: Settings,
    with_human: bool = True,
    isolated: bool = False,
) -> MachineTranslator:
    """Build and initialize a translator for a provider.

    Args:
        provider: Machine translation provider
        settings: Application settings
        with_human: Consult bundled or configured human translations
        isolated: Keep memories under a separate "demo" root, so demo output
                  never lands in a real provider's memory
    """
    root = Path(settings.translations_root).expanduser()
    if isolated:
        root = root / "demo"

    human = HumanTranslationExtension(settings.human_translations_dir) if with_human else None
    translator = MachineTranslator(
        provider,
        root,
        human=human,
        timeout=settings.request_timeout,
    )
    translator.initialize()
    return translator


def load_terms(path: Path) -> list[DictVocabularyTerm]:
    """Load terms from a JSON Lines file (one term document per line).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a line is not a JSON object with an "id"
    """
    if not path.exists():
        raise FileNotFoundError(f"Terms file not found: {path}")

    terms = []
    with open(path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                doc: Any = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_number}: invalid JSON: {e}") from e
            if not isinstance(doc, dict) or "id" not in doc:
                raise ValueError(f"{path}:{line_number}: expected an object with an 'id'")
            terms.append(DictVocabularyTerm(doc))
    return terms


def write_terms(terms: list[DictVocabularyTerm], path: Path) -> None:
    """Write terms as JSON Lines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for term in terms:
            f.write(json.dumps(term.to_dict(), ensure_ascii=False) + "\n")
