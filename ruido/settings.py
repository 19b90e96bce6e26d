#!/usr/bin/env python
"""
Validated search settings.

Merges defaults from config.Config with optional runtime overrides and
clamps the tuning knobs consumed by the search core.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config

PAGE_SIZE = 24


class SearchSettings(BaseModel):
    """Tuning for the ranked track search."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    page_size: int = PAGE_SIZE
    similarity_threshold: float = 0.2
    statement_timeout_ms: int = 3000
    max_query_length: int = Field(default=200, ge=1)

    # Text-search configurations: stemmed for title/description, plain for the vector column
    document_ts_config: str = "english"
    vector_ts_config: str = "simple"

    @field_validator("page_size", mode="before")
    @classmethod
    def _fixed_page_size(cls, value: object) -> int:
        # Clients depend on the page size; it is not tunable.
        return PAGE_SIZE

    @field_validator("similarity_threshold", mode="before")
    @classmethod
    def _clamp_threshold(cls, value: object) -> float:
        try:
            threshold = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.2
        return max(0.0, min(threshold, 1.0))

    @field_validator("statement_timeout_ms", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> int:
        try:
            timeout = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0
        return max(0, timeout)

    @field_validator("document_ts_config", "vector_ts_config")
    @classmethod
    def _validate_ts_config(cls, value: str) -> str:
        # Rendered into SQL as a regconfig literal
        if not value.isidentifier():
            raise ValueError("text search configuration must be a plain identifier")
        return value


def load_search_settings(overrides: Optional[Dict[str, Any]] = None) -> SearchSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "similarity_threshold": Config.SEARCH_SIMILARITY_THRESHOLD,
        "statement_timeout_ms": Config.SEARCH_STATEMENT_TIMEOUT_MS,
        "max_query_length": Config.SEARCH_MAX_QUERY_LENGTH,
    }
    if overrides:
        data.update(overrides)
    return SearchSettings.model_validate(data)


__all__ = [
    "PAGE_SIZE",
    "SearchSettings",
    "load_search_settings",
]
