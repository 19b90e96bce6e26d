# ruido/database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
import os  # Import os for path handling
import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint, event, text
from sqlalchemy.dialects.postgresql import TSVECTOR
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)

LICENSES = ("cc_by", "cc_by_sa", "cc0", "custom")

# tsvector on PostgreSQL; plain normalized token text elsewhere
SearchVector = db.Text().with_variant(TSVECTOR(), "postgresql")


def _new_id() -> str:
    return str(uuid4())


def iso_utc(value):
    # naive columns hold UTC
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


class Profile(UserMixin, db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    handle = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    tracks = relationship("Track", back_populates="profile", lazy=True)
    likes = relationship("Like", back_populates="profile", cascade="all, delete-orphan", lazy=True)

    def get_id(self) -> str:
        return str(self.id)

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "handle": self.handle,
            "displayName": self.display_name,
        }

    def to_dict(self) -> dict:
        data = self.to_summary()
        data["bio"] = self.bio
        data["createdAt"] = iso_utc(self.created_at)
        return data

    def __repr__(self) -> str:
        return f"<Profile @{self.handle}>"


class Tag(db.Model):
    __tablename__ = "tags"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)

    track_joins = relationship("TrackTag", back_populates="tag", lazy=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"


class Track(db.Model):
    __tablename__ = "tracks"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    profile_id = db.Column(
        db.String(36),
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    duration_sec = db.Column(db.Integer, nullable=False, default=1)
    bpm = db.Column(db.Integer, nullable=True)
    key = db.Column(db.String(5), nullable=True)
    license = db.Column(db.String(16), nullable=False, index=True)
    audio_url = db.Column(db.String(500), nullable=False)
    cover_url = db.Column(db.String(500), nullable=True)
    waveform = db.Column(db.JSON, nullable=False, default=list)  # list[float] in [0, 1]
    plays = db.Column(db.BigInteger, nullable=False, default=0)
    likes = db.Column(db.BigInteger, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Derived from title + description + tag names; see domain.tracks.service.refresh_search_vector
    search_tags = db.Column(SearchVector, nullable=True)

    profile = relationship("Profile", back_populates="tracks")
    tag_joins = relationship(
        "TrackTag",
        back_populates="track",
        cascade="all, delete-orphan",
        lazy=True,
    )

    __table_args__ = (
        CheckConstraint("plays >= 0", name="ck_tracks_plays_non_negative"),
        CheckConstraint("likes >= 0", name="ck_tracks_likes_non_negative"),
        CheckConstraint("duration_sec >= 1", name="ck_tracks_duration_positive"),
        CheckConstraint("bpm IS NULL OR (bpm > 0 AND bpm <= 300)", name="ck_tracks_bpm_range"),
        CheckConstraint(
            "license IN ('cc_by', 'cc_by_sa', 'cc0', 'custom')",
            name="ck_tracks_license",
        ),
    )

    @property
    def tag_names(self) -> list:
        return [join.tag.name for join in self.tag_joins if join.tag is not None]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "profile_id": self.profile_id,
            "title": self.title,
            "description": self.description,
            "duration_sec": self.duration_sec,
            "bpm": self.bpm,
            "key": self.key,
            "license": self.license,
            "audio_url": self.audio_url,
            "cover_url": self.cover_url,
            "waveform": self.waveform,
            "plays": int(self.plays or 0),
            "likes": int(self.likes or 0),
            "created_at": iso_utc(self.created_at),
            "tags": self.tag_names,
        }

    def __repr__(self) -> str:
        return f"<Track {self.title}>"


class TrackTag(db.Model):
    __tablename__ = "track_tags"

    track_id = db.Column(
        db.String(36),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id = db.Column(
        db.String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    track = relationship("Track", back_populates="tag_joins")
    tag = relationship("Tag", back_populates="track_joins")


class Like(db.Model):
    __tablename__ = "likes"

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(
        db.String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    track_id = db.Column(
        db.String(36),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="likes")
    track = relationship("Track")

    __table_args__ = (
        UniqueConstraint("profile_id", "track_id", name="uq_likes_profile_track"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "profile_id": self.profile_id,
            "track_id": self.track_id,
            "created_at": iso_utc(self.created_at),
        }


def _register_sqlite_functions(dbapi_connection, connection_record):
    """Expose the PostgreSQL search functions the ranked query relies on."""
    from ruido.domain.search.similarity import match_rank, trigram_similarity

    dbapi_connection.create_function("similarity", 2, trigram_similarity, deterministic=True)
    dbapi_connection.create_function("ts_match_rank", 3, match_rank, deterministic=True)


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        engine = db.engine
        dialect = engine.dialect.name
        if dialect == "sqlite":
            event.listen(engine, "connect", _register_sqlite_functions)
        elif dialect == "postgresql":
            with engine.begin() as conn:
                conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
        db.create_all()
        logger.info("Database tables created or already exist (dialect=%s).", dialect)
