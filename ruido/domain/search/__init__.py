"""Hybrid full-text + trigram track search."""

from .assembler import build_search_response, serialize_track, serialize_tracks
from .executor import (
    SearchBackendError,
    SearchPage,
    TrackSearchService,
    list_available_tags,
    reorder_by_ids,
)
from .filters import TrackSearchParams, build_filter_sql, build_track_where
from .ordering import SORT_KEYS, build_track_order_by, normalize_sort
from .pagination import Pagination, coerce_page, get_pagination, total_pages
from .ranking import SearchQueryError, build_ranked_statements, build_search_sql, validate_search_query

__all__ = [
    "SearchBackendError",
    "SearchPage",
    "TrackSearchService",
    "list_available_tags",
    "reorder_by_ids",
    "TrackSearchParams",
    "build_filter_sql",
    "build_track_where",
    "SORT_KEYS",
    "build_track_order_by",
    "normalize_sort",
    "Pagination",
    "coerce_page",
    "get_pagination",
    "total_pages",
    "SearchQueryError",
    "build_ranked_statements",
    "build_search_sql",
    "validate_search_query",
    "build_search_response",
    "serialize_track",
    "serialize_tracks",
]
