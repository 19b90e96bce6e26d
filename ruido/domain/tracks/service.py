"""Track writes: creation, edits, likes and plays.

Every write that touches title, description or tags finishes with
``refresh_search_vector`` inside the same transaction. Counters are changed
with SQL-side arithmetic so concurrent requests cannot lose updates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import text, update
from sqlalchemy.exc import IntegrityError

from ruido.database.db_manager import Like, Track, TrackTag, db
from ruido.domain.search.similarity import lexemes
from ruido.domain.tracks.tags import normalize_tags, upsert_tags
from ruido.models.dto import TrackUpdateDTO, UploadCompleteDTO
from ruido.observability.metrics import record_track_event
from ruido.settings import load_search_settings

logger = logging.getLogger(__name__)

WAVEFORM_SAMPLES = 200


class TrackNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class LikeResult:
    liked: bool
    likes: int


def generate_waveform(samples: int = WAVEFORM_SAMPLES) -> List[float]:
    """Placeholder envelope until real waveform analysis exists: |sin| over one half period."""
    return [round(abs(math.sin((i / samples) * math.pi)), 3) for i in range(samples)]


def build_public_url(endpoint: str, bucket: str, key: str) -> str:
    return f"{endpoint.rstrip('/')}/{bucket}/{key.lstrip('/')}"


def search_document(track: Track) -> str:
    parts = [track.title or "", track.description or ""]
    parts.extend(track.tag_names)
    return " ".join(part for part in parts if part)


def refresh_search_vector(track: Track, session=None) -> None:
    """Recompute ``search_tags`` from the track's current title, description and tags."""
    session = session if session is not None else db.session
    document = search_document(track)
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        config = load_search_settings().vector_ts_config
        session.flush()
        session.execute(
            text(f"UPDATE tracks SET search_tags = to_tsvector('{config}', :doc) WHERE id = :id"),
            {"doc": document, "id": track.id},
        )
        session.expire(track, ["search_tags"])
    else:
        track.search_tags = " ".join(lexemes(document, "simple"))


def _replace_tags(track: Track, names: Iterable[str], session) -> None:
    tags = upsert_tags(names, session=session)
    current = {join.tag_id: join for join in track.tag_joins}
    track.tag_joins = [current.get(tag.id) or TrackTag(tag=tag) for tag in tags]


def create_track(
    profile_id: str,
    payload: UploadCompleteDTO,
    *,
    storage_endpoint: str,
    storage_bucket: str,
    session=None,
) -> Track:
    session = session if session is not None else db.session
    track = Track(
        profile_id=profile_id,
        title=payload.title,
        description=payload.description,
        license=payload.license,
        duration_sec=payload.duration_sec,
        bpm=payload.bpm,
        key=payload.key,
        audio_url=build_public_url(storage_endpoint, storage_bucket, payload.audio_key),
        cover_url=(
            build_public_url(storage_endpoint, storage_bucket, payload.cover_key)
            if payload.cover_key
            else None
        ),
        waveform=generate_waveform(),
    )
    session.add(track)
    _replace_tags(track, normalize_tags(payload.tags), session)
    refresh_search_vector(track, session=session)
    session.commit()
    logger.info("Created track %s for profile %s", track.id, profile_id)
    return track


def update_track(track: Track, changes: TrackUpdateDTO, session=None) -> Track:
    session = session if session is not None else db.session
    if changes.title is not None:
        track.title = changes.title
    if changes.description is not None:
        track.description = changes.description
    if changes.tags is not None:
        _replace_tags(track, normalize_tags(changes.tags), session)
    refresh_search_vector(track, session=session)
    session.commit()
    return track


def _require_track(track_id: str, session) -> None:
    if session.query(Track.id).filter(Track.id == track_id).first() is None:
        raise TrackNotFoundError(track_id)


def _current_likes(track_id: str, session) -> int:
    value = session.query(Track.likes).filter(Track.id == track_id).scalar()
    return int(value or 0)


def toggle_like(profile_id: str, track_id: str, session=None) -> LikeResult:
    """Delete-or-insert the (profile, track) like and move the counter with it."""
    session = session if session is not None else db.session
    _require_track(track_id, session)

    existing = (
        session.query(Like)
        .filter(Like.profile_id == profile_id, Like.track_id == track_id)
        .first()
    )

    if existing is not None:
        session.delete(existing)
        session.execute(
            update(Track)
            .where(Track.id == track_id, Track.likes > 0)
            .values(likes=Track.likes - 1)
        )
        session.commit()
        record_track_event("unlike")
        return LikeResult(liked=False, likes=_current_likes(track_id, session))

    session.add(Like(profile_id=profile_id, track_id=track_id))
    try:
        session.flush()
        session.execute(
            update(Track)
            .where(Track.id == track_id)
            .values(likes=Track.likes + 1)
        )
        session.commit()
    except IntegrityError:
        # A concurrent request inserted the same like and already counted it
        session.rollback()
        logger.debug("Like for %s/%s already recorded", profile_id, track_id)
        return LikeResult(liked=True, likes=_current_likes(track_id, session))

    record_track_event("like")
    return LikeResult(liked=True, likes=_current_likes(track_id, session))


def record_play(track_id: str, session=None) -> int:
    session = session if session is not None else db.session
    result = session.execute(
        update(Track)
        .where(Track.id == track_id)
        .values(plays=Track.plays + 1)
    )
    if result.rowcount == 0:
        session.rollback()
        raise TrackNotFoundError(track_id)
    session.commit()
    record_track_event("play")
    value = session.query(Track.plays).filter(Track.id == track_id).scalar()
    return int(value or 0)


def get_track(track_id: str, session=None) -> Optional[Track]:
    session = session if session is not None else db.session
    return session.get(Track, track_id)


__all__ = [
    "TrackNotFoundError",
    "LikeResult",
    "generate_waveform",
    "build_public_url",
    "search_document",
    "refresh_search_vector",
    "create_track",
    "update_track",
    "toggle_like",
    "record_play",
    "get_track",
]
