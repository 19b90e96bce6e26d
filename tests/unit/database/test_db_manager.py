from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError

from ruido.database.db_manager import Like, Tag, Track, TrackTag, iso_utc


@pytest.mark.unit
def test_tables_are_created(app_context):
    from ruido.database.db_manager import db

    tables = set(inspect(db.engine).get_table_names())
    assert {"profiles", "tags", "tracks", "track_tags", "likes"} <= tables


@pytest.mark.unit
def test_sqlite_connections_expose_search_functions(db_session):
    similarity = db_session.execute(text("SELECT similarity('word', 'two words')")).scalar()
    assert similarity == pytest.approx(4 / 11)

    rank = db_session.execute(
        text("SELECT ts_match_rank('kick kick', :q, 'english')"), {"q": "kicks"}
    ).scalar()
    assert rank == 1.0


@pytest.mark.unit
def test_counters_cannot_go_negative(factories, db_session):
    track = factories.TrackFactory()
    db_session.commit()

    track.likes = -1
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


@pytest.mark.unit
def test_license_vocabulary_is_enforced(factories, db_session):
    with pytest.raises(IntegrityError):
        factories.TrackFactory(license="gpl")
    db_session.rollback()


@pytest.mark.unit
def test_one_like_per_profile_and_track(factories, db_session):
    like = factories.LikeFactory()
    db_session.commit()

    db_session.add(Like(profile_id=like.profile_id, track_id=like.track_id))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


@pytest.mark.unit
def test_tag_names_are_unique(factories, db_session):
    factories.TagFactory(name="kick")
    db_session.commit()

    db_session.add(Tag(name="kick"))
    with pytest.raises(IntegrityError):
        db_session.flush()
    db_session.rollback()


@pytest.mark.unit
def test_removing_a_tag_join_keeps_the_tag(factories, db_session):
    track = factories.TrackFactory(tags=["kick", "drums"])
    db_session.commit()

    track.tag_joins = [join for join in track.tag_joins if join.tag.name == "kick"]
    db_session.commit()

    assert db_session.query(TrackTag).count() == 1
    assert db_session.query(Tag).count() == 2
    assert db_session.get(Track, track.id).tag_names == ["kick"]


@pytest.mark.unit
def test_to_dict_counts_are_ints(factories, db_session):
    track = factories.TrackFactory(plays=3, likes=2, tags=["kick"])
    db_session.commit()

    data = track.to_dict()
    assert data["plays"] == 3 and data["likes"] == 2
    assert data["tags"] == ["kick"]
    assert track.profile.to_summary()["handle"] == track.profile.handle


@pytest.mark.unit
def test_timestamps_are_emitted_as_utc():
    assert iso_utc(None) is None
    assert iso_utc(datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00Z"
    local = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    assert iso_utc(local) == "2024-05-01T12:30:00Z"


@pytest.mark.unit
def test_track_created_at_carries_utc_suffix(factories, db_session):
    track = factories.TrackFactory()
    assert track.to_dict()["created_at"].endswith("Z")
