"""Raw SQL for the relevance-ranked track search.

The relevance predicate accepts a row when any of these hold:

* the stemmed title/description document matches ``plainto_tsquery``;
* the precomputed ``search_tags`` vector matches under the plain config
  (this is what makes tag names searchable);
* trigram similarity of the title or the description exceeds the threshold.

Rows are scored by ``ts_rank_cd`` of the document and, second, by the better
of the two similarities. PostgreSQL is the production target; SQLite runs the
same statement shape through functions registered on each connection (see
``ruido.database.db_manager``).
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from ruido.domain.search.filters import TrackSearchParams, build_filter_sql
from ruido.domain.search.ordering import normalize_sort
from ruido.settings import SearchSettings

SUPPORTED_DIALECTS = ("postgresql", "sqlite")


class SearchQueryError(ValueError):
    """The free-text query cannot be handed to the text-search engine."""


def validate_search_query(query: str, max_length: int = 200) -> str:
    trimmed = (query or "").strip()
    if not trimmed:
        raise SearchQueryError("search query is empty")
    if len(trimmed) > max_length:
        raise SearchQueryError(f"search query exceeds {max_length} characters")
    if any(unicodedata.category(char) == "Cc" for char in trimmed):
        raise SearchQueryError("search query contains control characters")
    return trimmed


@dataclass(frozen=True)
class _Expressions:
    match: str
    rank: str
    sim: str


def _expressions(dialect: str, settings: SearchSettings) -> _Expressions:
    doc_cfg = settings.document_ts_config
    vec_cfg = settings.vector_ts_config
    document = "coalesce(t.title, '') || ' ' || coalesce(t.description, '')"

    if dialect == "postgresql":
        doc_vector = f"to_tsvector('{doc_cfg}', {document})"
        doc_query = f"plainto_tsquery('{doc_cfg}', :q)"
        match = (
            f"({doc_vector} @@ {doc_query}"
            f" OR t.search_tags @@ plainto_tsquery('{vec_cfg}', :q)"
            " OR similarity(t.title, :q) > :sim_threshold"
            " OR similarity(t.description, :q) > :sim_threshold)"
        )
        rank = f"ts_rank_cd({doc_vector}, {doc_query})"
        sim = "GREATEST(similarity(t.title, :q), similarity(t.description, :q))"
    elif dialect == "sqlite":
        match = (
            f"(ts_match_rank({document}, :q, '{doc_cfg}') > 0"
            f" OR ts_match_rank(t.search_tags, :q, '{vec_cfg}') > 0"
            " OR similarity(t.title, :q) > :sim_threshold"
            " OR similarity(t.description, :q) > :sim_threshold)"
        )
        rank = f"ts_match_rank({document}, :q, '{doc_cfg}')"
        sim = "max(similarity(t.title, :q), similarity(t.description, :q))"
    else:
        raise ValueError(
            f"ranked search is not supported on dialect {dialect!r} (expected one of {SUPPORTED_DIALECTS})"
        )

    return _Expressions(match=match, rank=rank, sim=sim)


def build_search_sql(
    query: Optional[str],
    dialect: str,
    settings: SearchSettings,
) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Relevance predicate and its binds, or None when the query is blank."""
    trimmed = (query or "").strip()
    if not trimmed:
        return None
    exprs = _expressions(dialect, settings)
    return exprs.match, {"q": trimmed, "sim_threshold": settings.similarity_threshold}


def build_rank_sql(dialect: str, settings: SearchSettings) -> Tuple[str, str]:
    """``rank`` and ``sim`` select expressions for ``dialect``."""
    exprs = _expressions(dialect, settings)
    return exprs.rank, exprs.sim


def build_ranked_order_sql(sort: Optional[str]) -> str:
    key = normalize_sort(sort)
    if key == "plays":
        return "t.plays DESC, t.id ASC"
    if key == "likes":
        return "t.likes DESC, t.id ASC"
    return "rank DESC, sim DESC, t.created_at DESC, t.id ASC"


@dataclass(frozen=True)
class RankedStatements:
    ids: TextClause
    count: TextClause
    binds: Dict[str, Any]
    take: int
    skip: int

    def page_binds(self) -> Dict[str, Any]:
        return {**self.binds, "take": self.take, "skip": self.skip}


def build_ranked_statements(
    params: TrackSearchParams,
    dialect: str,
    settings: SearchSettings,
    *,
    take: int,
    skip: int,
) -> Optional[RankedStatements]:
    """Page-of-ids query and its matching count query, sharing one WHERE clause."""
    search = build_search_sql(params.normalized_query, dialect, settings)
    if search is None:
        return None
    match_sql, binds = search
    filter_sql, filter_binds = build_filter_sql(params)
    binds = {**binds, **filter_binds}
    rank_sql, sim_sql = build_rank_sql(dialect, settings)
    where_sql = f"{filter_sql} AND {match_sql}"

    ids = text(
        f"SELECT t.id AS id, {rank_sql} AS rank, {sim_sql} AS sim"
        " FROM tracks t"
        f" WHERE {where_sql}"
        f" ORDER BY {build_ranked_order_sql(params.sort)}"
        " LIMIT :take OFFSET :skip"
    )
    count = text(f"SELECT COUNT(DISTINCT t.id) AS count FROM tracks t WHERE {where_sql}")
    return RankedStatements(ids=ids, count=count, binds=binds, take=take, skip=skip)


__all__ = [
    "SUPPORTED_DIALECTS",
    "SearchQueryError",
    "validate_search_query",
    "build_search_sql",
    "build_rank_sql",
    "build_ranked_order_sql",
    "RankedStatements",
    "build_ranked_statements",
]
