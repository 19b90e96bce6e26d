from .db_manager import Like, Profile, Tag, Track, TrackTag, db, initialize_database  # noqa: F401
