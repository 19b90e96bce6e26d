from __future__ import annotations

from typing import List, Optional

from sqlalchemy.sql.elements import ColumnElement

from ruido.database.db_manager import Track

SORT_KEYS = ("newest", "plays", "likes")
DEFAULT_SORT = "newest"


def normalize_sort(value: Optional[str]) -> str:
    candidate = (value or "").strip().lower()
    return candidate if candidate in SORT_KEYS else DEFAULT_SORT


def build_track_order_by(sort: Optional[str] = None) -> List[ColumnElement]:
    """Ordering for the relational path. ``Track.id`` breaks ties so pages never overlap."""
    key = normalize_sort(sort)
    if key == "plays":
        primary = Track.plays.desc()
    elif key == "likes":
        primary = Track.likes.desc()
    else:
        primary = Track.created_at.desc()
    return [primary, Track.id.asc()]


__all__ = ["SORT_KEYS", "DEFAULT_SORT", "normalize_sort", "build_track_order_by"]
