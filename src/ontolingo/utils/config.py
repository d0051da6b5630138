"""Configuration management for Ontolingo.

Handles provider credentials, storage locations and request settings using
Pydantic Settings. Supports environment variables and .env files.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Loads configuration from environment variables or .env file.
    All settings can be overridden via environment variables with ONTOLINGO_ prefix.

    Example .env file:
        ONTOLINGO_DEEPL_API_KEY=...
        ONTOLINGO_DEFAULT_PROVIDER=deepl
        ONTOLINGO_TRANSLATIONS_ROOT=/var/lib/ontolingo/vocabulary_translations

    Example usage:
        >>> settings = Settings()
        >>> print(settings.default_provider)
        deepl
    """

    # Storage
    translations_root: Path = Field(
        default=Path.home() / ".ontolingo" / "vocabulary_translations",
        description="Directory holding one translation memory directory per provider",
        json_schema_extra={"env": "ONTOLINGO_TRANSLATIONS_ROOT"},
    )

    human_translations_dir: Path | None = Field(
        default=None,
        description="Directory of curated {vocabulary}_{language}.xliff files (bundled if unset)",
        json_schema_extra={"env": "ONTOLINGO_HUMAN_TRANSLATIONS_DIR"},
    )

    # Provider selection
    default_provider: str = Field(
        default="deepl",
        description="Default machine translation provider (deepl, microsoft)",
        json_schema_extra={"env": "ONTOLINGO_DEFAULT_PROVIDER"},
    )

    default_language: str = Field(
        default="es",
        description="Default target language",
        pattern=r"^[a-z]{2}$",
        json_schema_extra={"env": "ONTOLINGO_DEFAULT_LANGUAGE"},
    )

    # DeepL credentials
    deepl_api_key: str | None = Field(
        default=None,
        description="DeepL API key",
        json_schema_extra={"env": "ONTOLINGO_DEEPL_API_KEY"},
    )

    deepl_use_free_api: bool = Field(
        default=True,
        description="Use the DeepL free API endpoint",
        json_schema_extra={"env": "ONTOLINGO_DEEPL_USE_FREE_API"},
    )

    # Microsoft Translator credentials
    microsoft_api_key: str | None = Field(
        default=None,
        description="Microsoft Translator subscription key",
        json_schema_extra={"env": "ONTOLINGO_MICROSOFT_API_KEY"},
    )

    microsoft_region: str | None = Field(
        default=None,
        description="Azure region of the Translator resource",
        json_schema_extra={"env": "ONTOLINGO_MICROSOFT_REGION"},
    )

    # Request Settings
    request_timeout: float = Field(
        default=30.0,
        description="Timeout for a single provider request (seconds)",
        gt=0,
        json_schema_extra={"env": "ONTOLINGO_REQUEST_TIMEOUT"},
    )

    max_concurrency: int = Field(
        default=4,
        description="Maximum number of terms translated concurrently",
        gt=0,
        json_schema_extra={"env": "ONTOLINGO_MAX_CONCURRENCY"},
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        json_schema_extra={"env": "ONTOLINGO_LOG_LEVEL"},
    )

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ONTOLINGO_",
        case_sensitive=False,
        extra="ignore",
    )

    def get_provider_credentials(self, provider: str | None = None) -> dict[str, str]:
        """Get credentials for specified machine translation provider.

        Args:
            provider: Provider name (deepl, microsoft). Uses default if None.

        Returns:
            Dictionary with provider credentials

        Raises:
            ValueError: If credentials not configured or provider unknown

        Example:
            >>> settings = Settings()
            >>> creds = settings.get_provider_credentials("microsoft")
            >>> # Returns: {"api_key": "...", "region": "westeurope"}
        """
        provider = provider or self.default_provider

        if provider == "deepl":
            if not self.deepl_api_key:
                raise ValueError("DeepL API key not configured. Set ONTOLINGO_DEEPL_API_KEY")
            return {"api_key": self.deepl_api_key}

        elif provider == "microsoft":
            if not self.microsoft_api_key:
                raise ValueError(
                    "Microsoft Translator key not configured. Set ONTOLINGO_MICROSOFT_API_KEY"
                )
            creds = {"api_key": self.microsoft_api_key}
            if self.microsoft_region:
                creds["region"] = self.microsoft_region
            return creds

        else:
            raise ValueError(f"Unknown machine translation provider: {provider}")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
