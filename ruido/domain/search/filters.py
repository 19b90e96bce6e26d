"""Track filter predicates.

One set of filter semantics (license, tag, fallback text match) rendered to
two targets: SQLAlchemy conjuncts for the relational path and a raw SQL
fragment for the ranked query, which aliases ``tracks`` as ``t``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

from ruido.database.db_manager import Tag, Track, TrackTag


@dataclass(frozen=True)
class TrackSearchParams:
    query: Optional[str] = None
    tag: Optional[str] = None
    license: Optional[str] = None
    sort: str = "newest"
    page: int = 1

    @property
    def normalized_query(self) -> Optional[str]:
        """Trimmed query, or None when it is empty or whitespace."""
        if self.query is None:
            return None
        trimmed = self.query.strip()
        return trimmed or None

    def without_query(self) -> "TrackSearchParams":
        return replace(self, query=None)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_track_where(
    params: TrackSearchParams,
    *,
    include_text_search: bool = True,
) -> List[ColumnElement]:
    """Conjuncts for ``Track.query.filter(*conjuncts)``; empty list means no filtering."""
    conjuncts: List[ColumnElement] = []

    if params.license:
        conjuncts.append(Track.license == params.license)

    if params.tag:
        conjuncts.append(Track.tag_joins.any(TrackTag.tag.has(Tag.name == params.tag)))

    query = params.normalized_query
    if include_text_search and query:
        pattern = f"%{_escape_like(query)}%"
        conjuncts.append(
            or_(
                Track.title.ilike(pattern, escape="\\"),
                Track.description.ilike(pattern, escape="\\"),
            )
        )

    return conjuncts


def build_filter_sql(params: TrackSearchParams) -> Tuple[str, Dict[str, Any]]:
    """License/tag conjuncts for the ranked query, as SQL text plus bind params."""
    conditions = ["1=1"]
    binds: Dict[str, Any] = {}

    if params.license:
        conditions.append("t.license = :license")
        binds["license"] = params.license

    if params.tag:
        conditions.append(
            "EXISTS (SELECT 1 FROM track_tags tt JOIN tags tag ON tag.id = tt.tag_id"
            " WHERE tt.track_id = t.id AND tag.name = :tag)"
        )
        binds["tag"] = params.tag

    return " AND ".join(conditions), binds


__all__ = ["TrackSearchParams", "build_track_where", "build_filter_sql"]
