from types import SimpleNamespace

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import DataError, OperationalError

from ruido.database.db_manager import Track
from ruido.domain.search import (
    SearchBackendError,
    SearchQueryError,
    TrackSearchParams,
    TrackSearchService,
    reorder_by_ids,
)
from ruido.domain.search.executor import RANKED, RELATIONAL
from ruido.settings import SearchSettings


class _Rows:
    def __init__(self, rows):
        self._rows = rows

    def all(self):
        return self._rows


class _SessionProxy:
    """Delegates to a real session; subclasses intercept ``execute``/``query``."""

    def __init__(self, session):
        self._session = session

    def __getattr__(self, name):
        return getattr(self._session, name)


@pytest.fixture
def service(db_session):
    return TrackSearchService(session=db_session, settings=SearchSettings())


@pytest.mark.unit
def test_reorder_by_ids_follows_rank_not_storage_order():
    a, b, c = (SimpleNamespace(id=name) for name in "abc")
    assert reorder_by_ids(["c", "a", "b"], [a, b, c]) == [c, a, b]
    assert reorder_by_ids(["c", "x", "a"], [a, b, c]) == [c, a]
    assert reorder_by_ids([], [a]) == []


@pytest.mark.unit
def test_ranked_results_keep_relevance_order(factories, db_session, service):
    weak = factories.TrackFactory(
        title="Dusty Kick", description="warm tape sample with long tail and room noise"
    )
    strong = factories.TrackFactory(title="Kick", description="kick kick")
    middle = factories.TrackFactory(title="Kick Layer", description="layered kick drum")
    factories.TrackFactory(title="Glass Pad", description="airy shimmer")
    db_session.commit()

    page = service.search(TrackSearchParams(query="kick"))

    assert page.path == RANKED
    assert [track.id for track in page.tracks] == [strong.id, middle.id, weak.id]
    assert page.ids == [strong.id, middle.id, weak.id]
    assert page.total == 3


@pytest.mark.unit
def test_blank_query_takes_relational_path(factories, db_session, service):
    older = factories.TrackFactory()
    newer = factories.TrackFactory()
    db_session.commit()

    for query in (None, "", "   "):
        page = service.search(TrackSearchParams(query=query))
        assert page.path == RELATIONAL
        assert [track.id for track in page.tracks] == [newer.id, older.id]


@pytest.mark.unit
def test_ranked_pages_partition_the_result_set(factories, db_session, service):
    tracks = [factories.TrackFactory(title=f"Kick {n}") for n in range(30)]
    db_session.commit()

    first = service.search(TrackSearchParams(query="kick", page=1))
    second = service.search(TrackSearchParams(query="kick", page=2))
    third = service.search(TrackSearchParams(query="kick", page=3))

    assert (first.total, second.total) == (30, 30)
    assert len(first.tracks) == 24
    assert len(second.tracks) == 6
    assert third.tracks == []
    seen = [track.id for track in first.tracks + second.tracks]
    assert len(set(seen)) == 30
    assert set(seen) == {track.id for track in tracks}


@pytest.mark.unit
def test_ranked_filters_by_tag_and_license(factories, db_session, service):
    wanted = factories.TrackFactory(title="Tape Kick", license="cc0", tags=["drums"])
    factories.TrackFactory(title="Room Kick", license="cc_by", tags=["drums"])
    factories.TrackFactory(title="Vinyl Kick", license="cc0", tags=["vinyl"])
    db_session.commit()

    page = service.search(TrackSearchParams(query="kick", tag="drums", license="cc0"))
    assert [track.id for track in page.tracks] == [wanted.id]
    assert page.total == 1


@pytest.mark.unit
def test_tag_names_are_searchable_through_vector(factories, db_session, service):
    track = factories.TrackFactory(title="Low Drone", description="rumble", tags=["sci-fi"])
    db_session.commit()

    page = service.search(TrackSearchParams(query="sci-fi"))
    assert [row.id for row in page.tracks] == [track.id]


@pytest.mark.unit
def test_ids_that_vanish_before_hydration_are_dropped(factories, db_session):
    keep = factories.TrackFactory(title="Kick", description="kick kick")
    gone = factories.TrackFactory(title="Kick Two", description="kick")
    db_session.commit()
    keep_id, gone_id = keep.id, gone.id

    class _DeletingSession(_SessionProxy):
        def execute(self, statement, params=None):
            result = self._session.execute(statement, params)
            if "LIMIT :take" in str(statement):
                rows = result.all()
                self._session.execute(delete(Track).where(Track.id == gone_id))
                return _Rows(rows)
            return result

    service = TrackSearchService(session=_DeletingSession(db_session), settings=SearchSettings())
    page = service.search(TrackSearchParams(query="kick"))

    assert page.ids == [keep_id, gone_id]
    assert [track.id for track in page.tracks] == [keep_id]
    assert page.dropped == 1


@pytest.mark.unit
def test_invalid_query_raises_query_error(service):
    with pytest.raises(SearchQueryError):
        service.search(TrackSearchParams(query="kick\x07"))


@pytest.mark.unit
@pytest.mark.parametrize(
    "exc, status",
    [
        (DataError("SELECT", {}, Exception("syntax error in tsquery")), 400),
        (OperationalError("SELECT", {}, Exception("canceling statement due to statement timeout")), 503),
    ],
)
def test_backend_failures_are_raised_not_empty(db_session, exc, status):
    class _FailingSession(_SessionProxy):
        def execute(self, statement, params=None):
            raise exc

        def query(self, *entities):
            raise exc

    service = TrackSearchService(session=_FailingSession(db_session), settings=SearchSettings())

    with pytest.raises(SearchBackendError) as ranked:
        service.search(TrackSearchParams(query="kick"))
    assert ranked.value.status_code == status

    with pytest.raises(SearchBackendError) as relational:
        service.search(TrackSearchParams())
    assert relational.value.status_code == status


@pytest.mark.unit
def test_unsupported_dialect_is_a_backend_error():
    session = SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name="mysql")))
    service = TrackSearchService(session=session, settings=SearchSettings())

    with pytest.raises(SearchBackendError) as info:
        service.search(TrackSearchParams(query="kick"))
    assert info.value.status_code == 500
