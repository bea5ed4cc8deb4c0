"""Application settings — Pydantic-based configuration with YAML/JSON and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML or JSON config file (if specified)
  2. Environment variables (WIKISIFT_ prefix)
  3. Default values (two Wikipedia sources and a disabled example API)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from wikisift.exceptions import ConfigurationError
from wikisift.models.source import (
    DEFAULT_USER_AGENT,
    CamelModel,
    CustomApiSource,
    FieldMapping,
    SearchSource,
    SourceType,
)

logger = logging.getLogger(__name__)

# Top-level keys used by camelCase configuration files.
_KEY_ALIASES = {
    "settings": "app",
    "customApiSources": "custom_api_sources",
}


class AppSettings(CamelModel):
    """Global search and presentation settings."""

    max_results: int = Field(default=10, description="Default result limit per search")
    timeout_seconds: int = Field(default=30, gt=0, description="Default HTTP timeout in seconds")
    enable_caching: bool = Field(default=True, description="Reserved; no cache is implemented")
    log_level: str = Field(default="warning", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="console", description="Log format: json, console")
    output_format: str = Field(default="table", description="Output format: table, json, plain")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent for sources that set none")


def _default_sources() -> list[SearchSource]:
    return [
        SearchSource(
            name="Wikipedia IT",
            url="https://it.wikipedia.org/api/rest_v1/page/summary/{query}",
            language="it",
            type=SourceType.API,
            parameters={"redirect": "true"},
        ),
        SearchSource(
            name="Wikipedia EN",
            url="https://en.wikipedia.org/api/rest_v1/page/summary/{query}",
            language="en",
            type=SourceType.API,
            parameters={"redirect": "true"},
        ),
    ]


def _default_custom_api_sources() -> list[CustomApiSource]:
    return [
        CustomApiSource(
            name="JSONPlaceholder Example",
            search_endpoint="https://jsonplaceholder.typicode.com/posts",
            enabled=False,
            language="en",
            search_query_param="title",
            field_mapping=FieldMapping(
                title_field="title",
                summary_field="body",
                url_field="id",
                custom_fields={"userId": "userId", "postId": "id"},
            ),
            max_results=5,
        ),
    ]


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the WIKISIFT_ prefix.
    Nested settings use double underscores: WIKISIFT_APP__MAX_RESULTS=5

    Example:
        WIKISIFT_APP__LOG_LEVEL=debug
        WIKISIFT_APP__OUTPUT_FORMAT=json
    """

    model_config = {
        "env_prefix": "WIKISIFT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app: AppSettings = Field(default_factory=AppSettings)
    sources: list[SearchSource] = Field(default_factory=_default_sources)
    custom_api_sources: list[CustomApiSource] = Field(default_factory=_default_custom_api_sources)

    @model_validator(mode="after")
    def _apply_default_user_agent(self) -> Settings:
        """Give sources without their own User-Agent the application-wide one."""
        for source in [*self.sources, *self.custom_api_sources]:
            if "user_agent" not in source.model_fields_set:
                source.user_agent = self.app.user_agent
        return self

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """Load settings from a YAML or JSON configuration file.

        Values present in the file win; environment variables fill in
        whatever the file leaves out.

        Args:
            path: Path to the config file (``.json`` is parsed as JSON,
                anything else as YAML).

        Returns:
            Populated Settings instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the file cannot be parsed or validated.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                if config_path.suffix.lower() == ".json":
                    data = json.load(f) or {}
                else:
                    data = yaml.safe_load(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        try:
            settings = cls(**cls._normalize_keys(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

        logger.info("Configuration loaded from %s", config_path)
        return settings

    def to_file(self, path: str | Path) -> None:
        """Write the sources and app settings to a YAML or JSON file."""
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        data = self.model_dump(mode="json", include={"app", "sources", "custom_api_sources"})
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            if config_path.suffix.lower() == ".json":
                json.dump(data, f, ensure_ascii=False, indent=2)
            else:
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
        logger.info("Configuration saved to %s", config_path)

    def set_source_enabled(self, name: str, enabled: bool) -> bool:
        """Enable or disable every source whose name matches *name* (case-insensitive).

        Returns:
            True if at least one source matched.
        """
        found = False
        for source in [*self.sources, *self.custom_api_sources]:
            if source.name.lower() == name.lower():
                source.enabled = enabled
                found = True
        if not found:
            logger.warning("Source not found: %s", name)
        return found

    @staticmethod
    def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
        return {_KEY_ALIASES.get(key, key): value for key, value in data.items()}
