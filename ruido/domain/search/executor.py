"""Track search execution.

Two paths share the filter semantics and the page window:

* no free-text query: a single relational query with the structured filters,
  the sort order and LIMIT/OFFSET, plus a COUNT over the same predicate;
* free-text query: a ranked raw query returns one page of ids, a COUNT over
  the same WHERE gives the total, then the ids are hydrated through the ORM
  and put back into rank order.

Database failures are raised as ``SearchBackendError`` so callers can tell a
broken search apart from a search that matched nothing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.exc import DataError, OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from ruido.database.db_manager import Tag, Track, TrackTag, db
from ruido.domain.search.filters import TrackSearchParams, build_track_where
from ruido.domain.search.ordering import build_track_order_by
from ruido.domain.search.pagination import Pagination, get_pagination, total_pages
from ruido.domain.search.ranking import SearchQueryError, build_ranked_statements, validate_search_query
from ruido.observability.metrics import record_dropped_rows, record_search, record_search_failure
from ruido.settings import SearchSettings, load_search_settings

logger = logging.getLogger(__name__)

RANKED = "ranked"
RELATIONAL = "relational"


class SearchBackendError(RuntimeError):
    """The storage engine rejected or failed a search query."""

    def __init__(self, message: str, *, status_code: int = 500, kind: str = "backend") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind


@dataclass
class SearchPage:
    tracks: List[Track]
    total: int
    pagination: Pagination
    path: str
    dropped: int = 0
    ids: List[str] = field(default_factory=list)

    @property
    def page(self) -> int:
        return self.pagination.page

    @property
    def page_size(self) -> int:
        return self.pagination.take

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.pagination.take)


def reorder_by_ids(ids: Sequence[str], records: Iterable[Track]) -> List[Track]:
    """Project ``records`` onto the order of ``ids``; ids without a record are skipped."""
    lookup = {record.id: record for record in records}
    return [lookup[track_id] for track_id in ids if track_id in lookup]


def _hydration_options():
    return (
        selectinload(Track.profile),
        selectinload(Track.tag_joins).selectinload(TrackTag.tag),
    )


def _backend_error(exc: SQLAlchemyError) -> SearchBackendError:
    if isinstance(exc, (DataError, ProgrammingError)):
        return SearchBackendError("search query was rejected", status_code=400, kind="rejected")
    if isinstance(exc, OperationalError):
        return SearchBackendError("search backend unavailable", status_code=503, kind="unavailable")
    return SearchBackendError("search failed", status_code=500, kind="backend")


class TrackSearchService:
    """Runs track searches against one SQLAlchemy session."""

    def __init__(self, session=None, settings: Optional[SearchSettings] = None) -> None:
        self._session = session if session is not None else db.session
        self.settings = settings or load_search_settings()

    @property
    def dialect(self) -> str:
        return self._session.get_bind().dialect.name

    def search(self, params: TrackSearchParams) -> SearchPage:
        pagination = get_pagination(params.page, self.settings.page_size)
        started = time.perf_counter()

        if params.normalized_query is None:
            page = self._search_relational(params.without_query(), pagination)
        else:
            page = self._search_ranked(params, pagination)

        record_search(page.path, time.perf_counter() - started)
        logger.debug(
            "Track search served",
            extra={"search_path": page.path, "total": page.total, "returned": len(page.tracks)},
        )
        return page

    def _search_relational(self, params: TrackSearchParams, pagination: Pagination) -> SearchPage:
        conjuncts = build_track_where(params)
        try:
            base = self._session.query(Track).filter(*conjuncts)
            total = base.count()
            tracks = (
                base.options(*_hydration_options())
                .order_by(*build_track_order_by(params.sort))
                .offset(pagination.skip)
                .limit(pagination.take)
                .all()
            )
        except SQLAlchemyError as exc:
            self._session.rollback()
            error = _backend_error(exc)
            record_search_failure(error.kind)
            logger.error("Relational track search failed: %s", exc, exc_info=True)
            raise error from exc

        return SearchPage(
            tracks=tracks,
            total=total,
            pagination=pagination,
            path=RELATIONAL,
            ids=[track.id for track in tracks],
        )

    def _apply_statement_timeout(self) -> None:
        timeout_ms = self.settings.statement_timeout_ms
        if timeout_ms and self.dialect == "postgresql":
            # SET does not take bind parameters; the value is a validated int
            self._session.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))

    def _search_ranked(self, params: TrackSearchParams, pagination: Pagination) -> SearchPage:
        try:
            validate_search_query(params.normalized_query, self.settings.max_query_length)
        except SearchQueryError:
            record_search_failure("invalid_query")
            raise

        try:
            statements = build_ranked_statements(
                params,
                self.dialect,
                self.settings,
                take=pagination.take,
                skip=pagination.skip,
            )
        except ValueError as exc:
            record_search_failure("unsupported")
            raise SearchBackendError(str(exc), status_code=500, kind="unsupported") from exc

        try:
            self._apply_statement_timeout()
            rows = self._session.execute(statements.ids, statements.page_binds()).all()
            total = int(self._session.execute(statements.count, statements.binds).scalar() or 0)
            ids = [row.id for row in rows]
            records: List[Track] = []
            if ids:
                # License/tag are applied again so a row edited since ranking cannot slip through
                records = (
                    self._session.query(Track)
                    .options(*_hydration_options())
                    .filter(Track.id.in_(ids), *build_track_where(params, include_text_search=False))
                    .all()
                )
        except SQLAlchemyError as exc:
            self._session.rollback()
            error = _backend_error(exc)
            record_search_failure(error.kind)
            logger.error("Ranked track search failed: %s", exc, exc_info=True)
            raise error from exc

        tracks = reorder_by_ids(ids, records)
        dropped = len(ids) - len(tracks)
        if dropped:
            record_dropped_rows(dropped)
            logger.debug("Dropped %d ranked ids that no longer hydrate", dropped)

        return SearchPage(
            tracks=tracks,
            total=total,
            pagination=pagination,
            path=RANKED,
            dropped=dropped,
            ids=ids,
        )


def list_available_tags(session=None) -> List[str]:
    """Every tag name, independent of any search predicate."""
    session = session if session is not None else db.session
    return [name for (name,) in session.query(Tag.name).order_by(Tag.name.asc()).all()]


__all__ = [
    "RANKED",
    "RELATIONAL",
    "SearchBackendError",
    "SearchPage",
    "TrackSearchService",
    "reorder_by_ids",
    "list_available_tags",
]
