"""Flatten hydrated tracks into the public API shape."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ruido.database.db_manager import Profile, Track, iso_utc
from ruido.domain.search.executor import SearchPage


def _as_int(value: Any) -> int:
    # BigInteger/NUMERIC counters may arrive as Decimal or str depending on the driver
    if value is None:
        return 0
    return int(value)


def serialize_profile(profile: Optional[Profile]) -> Optional[Dict[str, Any]]:
    if profile is None:
        return None
    return profile.to_summary()


def serialize_track(track: Track) -> Dict[str, Any]:
    return {
        "id": track.id,
        "title": track.title,
        "description": track.description,
        "durationSec": track.duration_sec,
        "bpm": track.bpm,
        "key": track.key,
        "license": track.license,
        "audioUrl": track.audio_url,
        "coverUrl": track.cover_url,
        "createdAt": iso_utc(track.created_at),
        "plays": _as_int(track.plays),
        "likes": _as_int(track.likes),
        "profile": serialize_profile(track.profile),
        "tags": track.tag_names,
    }


def serialize_tracks(tracks: Iterable[Track]) -> List[Dict[str, Any]]:
    return [serialize_track(track) for track in tracks]


def build_search_response(page: SearchPage, available_tags: List[str]) -> Dict[str, Any]:
    return {
        "data": serialize_tracks(page.tracks),
        "page": page.page,
        "pageSize": page.page_size,
        "total": page.total,
        "totalPages": page.total_pages,
        "availableTags": available_tags,
    }


__all__ = ["serialize_profile", "serialize_track", "serialize_tracks", "build_search_response"]
