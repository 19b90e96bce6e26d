# manage.py
import logging
import re
import sys

from app import create_app
from ruido.database.db_manager import Profile, Track, db
from ruido.domain.tracks import create_track
from ruido.models.dto import UploadCompleteDTO

logger = logging.getLogger(__name__)

DEMO_PROFILE = {
    "handle": "ruido-demo",
    "display_name": "ruido demo",
    "bio": "Synthesizing tomorrow's frequencies today.",
}

DEMO_TRACKS = [
    {
        "title": "Neon Skyline Kick",
        "description": "Punchy kick sample forged in a neon-soaked skyline.",
        "durationSec": 12,
        "bpm": 120,
        "key": "C",
        "license": "cc0",
        "tags": ["kick", "drums", "analog"],
    },
    {
        "title": "Gravity Well Bass",
        "description": "Low-end growl captured from a gravity well experiment.",
        "durationSec": 18,
        "bpm": 90,
        "key": "F#",
        "license": "cc_by",
        "tags": ["bass", "sci-fi"],
    },
    {
        "title": "Solar Winds Pad",
        "description": "Ethereal pad sampled from solar wind resonance.",
        "durationSec": 26,
        "bpm": 70,
        "key": "D",
        "license": "cc_by_sa",
        "tags": ["pad", "ambient"],
    },
    {
        "title": "Quantum Perc Loop",
        "description": "Percussive loop generated from quantum lattice vibrations.",
        "durationSec": 32,
        "bpm": 110,
        "key": "A",
        "license": "cc_by",
        "tags": ["percussion", "loop"],
    },
    {
        "title": "Aurora Vox Texture",
        "description": "Choral texture recorded beneath an aurora storm.",
        "durationSec": 22,
        "bpm": None,
        "key": None,
        "license": "custom",
        "tags": ["vocal", "texture"],
    },
]


def _slug(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables created at {app.config['SQLALCHEMY_DATABASE_URI']}")


def seed():
    """Insert the demo profile and tracks; existing titles are left alone."""
    app = create_app()
    with app.app_context():
        profile = Profile.query.filter_by(handle=DEMO_PROFILE["handle"]).first()
        if profile is None:
            profile = Profile(**DEMO_PROFILE)
            db.session.add(profile)
            db.session.commit()

        created = 0
        for demo in DEMO_TRACKS:
            if Track.query.filter_by(title=demo["title"]).first() is not None:
                continue
            slug = _slug(demo["title"])
            payload = UploadCompleteDTO.model_validate(
                {**demo, "audioKey": f"{slug}.mp3", "coverKey": f"{slug}.jpg"}
            )
            create_track(
                profile.id,
                payload,
                storage_endpoint="https://cdn.ruido.dev",
                storage_bucket="demo",
            )
            created += 1
        print(f"Seeded {created} demo tracks.")


COMMANDS = {
    "create_db": create_db,
    "seed": seed,
}


if __name__ == '__main__':
    if len(sys.argv) > 1:
        command = COMMANDS.get(sys.argv[1])
        if command is None:
            print(f"Unknown command: {sys.argv[1]}")
            print("Usage: python manage.py [create_db|seed]")
            sys.exit(1)
        command()
    else:
        print("No command provided. Usage: python manage.py [create_db|seed]")
