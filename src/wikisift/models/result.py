"""Search result model — Uniform record produced by every search adapter."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TITLE_PLACEHOLDER = "Title not available"
SUMMARY_PLACEHOLDER = "Summary not available"


class SearchResult(BaseModel):
    """Normalized search result shared by all adapters.

    Adapters substitute placeholders for a missing title or summary, so
    consumers never see empty values in those two fields. Instances are
    frozen once created.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str = Field(description="Result title")
    summary: str = Field(description="Result summary or extract")
    url: str = Field(default="", description="Canonical URL of the result (may be empty)")
    source: str = Field(description="Name of the adapter that produced the result")
    language: str = Field(default="it", description="Result language code")
    relevance_score: float = Field(default=1.0, description="Relevance score (constant placeholder)")
    retrieved_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Timestamp of retrieval")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Adapter-specific extras")
