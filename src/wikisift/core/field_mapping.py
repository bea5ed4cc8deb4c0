"""Field-mapping interpreter — Dotted-path extraction from arbitrary JSON.

``resolve_path`` is the single traversal routine used both to locate the
results array inside a response body and to pull individual fields out of
each result element.
"""

from __future__ import annotations

import json
from typing import Any

from wikisift.adapters.base.exceptions import FieldMappingError
from wikisift.models.result import SUMMARY_PLACEHOLDER, TITLE_PLACEHOLDER, SearchResult
from wikisift.models.source import FieldMapping


def resolve_path(node: Any, path: str) -> tuple[bool, Any]:
    """Descend *node* one object key per dot-separated segment of *path*.

    Args:
        node: A decoded JSON value.
        path: Dotted key path, e.g. ``"data.items"``.

    Returns:
        ``(True, value)`` when every segment exists, otherwise ``(False, None)``.
        An empty path never resolves.
    """
    if not path:
        return False, None

    current = node
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return False, None
        current = current[segment]
    return True, current


def scalar_text(value: Any) -> str:
    """Render a JSON value as text: strings as-is, everything else as raw JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def field_text(element: Any, path: str) -> str | None:
    """Resolve *path* in *element* and render it, or ``None`` if absent or null."""
    found, value = resolve_path(element, path)
    if not found or value is None:
        return None
    return scalar_text(value)


def map_fields(
    element: Any,
    mapping: FieldMapping,
    *,
    source: str,
    language: str,
) -> SearchResult:
    """Map one JSON element to a ``SearchResult`` using *mapping*.

    Each path is resolved independently; an absent path only affects its
    own field. Custom fields that are absent or empty are left out of the
    metadata.

    Raises:
        FieldMappingError: If *element* is not a JSON object.
    """
    if not isinstance(element, dict):
        raise FieldMappingError(f"Expected a JSON object, got {type(element).__name__}")

    metadata: dict[str, Any] = {"thumbnail": field_text(element, mapping.thumbnail_field) or ""}
    for key, path in mapping.custom_fields.items():
        value = field_text(element, path)
        if value:
            metadata[key] = value

    return SearchResult(
        title=field_text(element, mapping.title_field) or TITLE_PLACEHOLDER,
        summary=field_text(element, mapping.summary_field) or SUMMARY_PLACEHOLDER,
        url=field_text(element, mapping.url_field) or "",
        source=source,
        language=field_text(element, mapping.language_field) or language,
        relevance_score=1.0,
        metadata=metadata,
    )
