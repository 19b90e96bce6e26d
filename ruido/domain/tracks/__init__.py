"""Track write path: tags, uploads, likes and plays."""

from .service import (
    LikeResult,
    TrackNotFoundError,
    create_track,
    generate_waveform,
    get_track,
    record_play,
    refresh_search_vector,
    toggle_like,
    update_track,
)
from .tags import LICENSE_LABELS, LICENSES, is_license_allowed, normalize_tag, normalize_tags, upsert_tags

__all__ = [
    "LikeResult",
    "TrackNotFoundError",
    "create_track",
    "generate_waveform",
    "get_track",
    "record_play",
    "refresh_search_vector",
    "toggle_like",
    "update_track",
    "LICENSE_LABELS",
    "LICENSES",
    "is_license_allowed",
    "normalize_tag",
    "normalize_tags",
    "upsert_tags",
]
