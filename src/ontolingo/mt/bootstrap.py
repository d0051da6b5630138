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

"""Seed translation memories for machine translation providers."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from .base import ProviderDescriptor

logger = logging.getLogger(__name__)

SEEDS_DIR = Path(__file__).parent.parent / "resources" / "seeds"


class BootstrapError(RuntimeError):
    """Raised when seed translation memories cannot be installed."""


def memory_file_name(identifier: str, vocabulary: str, language: str) -> str:
    """Name of a provider's memory file, e.g. ``microsoft_hpo_es.xliff``."""
    return f"{identifier}_{vocabulary}_{language}.xliff"


def bootstrap_provider_home(
    descriptor: ProviderDescriptor,
    translations_root: str | Path,
    seeds_dir: str | Path | None = None,
) -> Path:
    """Install the bundled seed memories of a provider.

    Copies one seed per supported (vocabulary, language) pair into
    ``{translations_root}/{identifier}``. Nothing happens when that directory
    already exists. Seeds are staged in a temporary sibling directory that
    is renamed into place once complete.

    Args:
        descriptor: Provider to bootstrap
        translations_root: Root of all provider directories
        seeds_dir: Directory holding the seed files (bundled seeds by default)

    Returns:
        The provider home directory

    Raises:
        BootstrapError: If any seed cannot be copied
    """
    root = Path(translations_root)
    home = root / descriptor.identifier
    if home.exists():
        logger.debug(f"Translation memory home {home} exists, skipping bootstrap")
        return home

    source_dir = Path(seeds_dir) if seeds_dir else SEEDS_DIR
    try:
        root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{descriptor.identifier}-", dir=root))
    except OSError as e:
        raise BootstrapError(f"Cannot create translation memory home {home}: {e}") from e

    try:
        for vocabulary in sorted(descriptor.vocabularies):
            for language in sorted(descriptor.languages):
                name = memory_file_name(descriptor.identifier, vocabulary, language)
                shutil.copyfile(source_dir / name, staging / name)
        staging.rename(home)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        if home.is_dir():
            # Another process installed the seeds first
            logger.debug(f"Translation memory home {home} appeared during bootstrap")
            return home
        logger.error(f"Bootstrap of {descriptor.identifier} failed: {e}")
        raise BootstrapError(f"Cannot install seed translations into {home}: {e}") from e

    logger.info(f"Bootstrapped translation memories for {descriptor.identifier} in {home}")
    return home
