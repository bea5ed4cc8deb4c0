"""Source descriptor models — Static configuration for each search backend.

Descriptors accept both snake_case and camelCase keys, so configuration
files written by earlier camelCase tooling load unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_USER_AGENT = "WikiSift/1.0"


class CamelModel(BaseModel):
    """Base model accepting camelCase aliases alongside field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceType(str, Enum):
    """Protocol family of a standard source."""

    API = "api"
    WEB_SCRAPING = "web_scraping"


_SOURCE_TYPE_ORDINALS = {0: SourceType.API, 1: SourceType.WEB_SCRAPING}


class FieldMapping(CamelModel):
    """Dotted-path rules translating a JSON element into result fields."""

    title_field: str = Field(default="title", description="Path of the title value")
    summary_field: str = Field(default="summary", description="Path of the summary value")
    url_field: str = Field(default="url", description="Path of the URL value")
    language_field: str = Field(default="language", description="Path of the language value")
    thumbnail_field: str = Field(default="thumbnail", description="Path of the thumbnail URL")
    custom_fields: dict[str, str] = Field(
        default_factory=dict,
        description="Extra metadata key -> path of its value",
    )


class SearchSource(CamelModel):
    """Configuration for a standard search source."""

    name: str = Field(description="Unique source name (case-insensitive match key)")
    url: str = Field(default="", description="Source base address")
    enabled: bool = Field(default=True, description="Whether the source is active")
    language: str = Field(default="it", description="Language code of the source")
    timeout_seconds: int = Field(default=30, gt=0, description="HTTP timeout in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent with every request")
    type: SourceType = Field(default=SourceType.API, description="Protocol family")
    parameters: dict[str, str] = Field(default_factory=dict, description="Extra source parameters")
    css_selectors: dict[str, str] = Field(default_factory=dict, description="Selectors for scraping sources")

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> Any:
        """Accept enum ordinals and any casing ("Api", "WebScraping")."""
        if isinstance(v, int) and not isinstance(v, bool):
            return _SOURCE_TYPE_ORDINALS.get(v, v)
        if isinstance(v, str):
            normalized = v.strip().lower().replace("-", "_")
            return "web_scraping" if normalized == "webscraping" else normalized
        return v


class CustomApiSource(SearchSource):
    """Configuration for a user-defined JSON HTTP API source."""

    search_endpoint: str = Field(default="", description="Search URL (query parameters are appended)")
    detail_endpoint: str = Field(default="", description="Detail URL for a single item")
    field_mapping: FieldMapping = Field(default_factory=FieldMapping, description="Field mapping rules")
    query_parameters: dict[str, str] = Field(default_factory=dict, description="Extra query parameters")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra HTTP headers")
    search_query_param: str = Field(default="q", description="Query parameter carrying the search text")
    response_data_path: str = Field(default="", description="Dotted path of the results inside the response")
    max_results: int = Field(default=5, description="Per-source result cap (0 disables it)")
