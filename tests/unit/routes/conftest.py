from contextlib import contextmanager

import pytest

from tests.support import factories as test_factories


@pytest.fixture
def seed(app):
    """Create rows in a short-lived app context, committed before any request runs.

    Requests must not share the seeding app context: Flask-Login caches the
    resolved profile on ``g``, which lives as long as the app context.
    """
    from ruido.database.db_manager import db

    @contextmanager
    def _seed():
        with app.app_context():
            test_factories.set_session(db.session)
            try:
                yield db.session
                db.session.commit()
            finally:
                test_factories.reset_session()
                db.session.remove()

    return _seed


@pytest.fixture
def demo_catalog(app, seed):
    """The five demo tracks created through the upload path; returns ids by title."""
    from manage import DEMO_PROFILE, DEMO_TRACKS
    from ruido.domain.tracks import create_track
    from ruido.models.dto import UploadCompleteDTO

    with seed() as session:
        owner = test_factories.ProfileFactory(**DEMO_PROFILE)
        session.flush()
        ids = {"owner": owner.id}
        for index, demo in enumerate(DEMO_TRACKS):
            payload = UploadCompleteDTO.model_validate(
                {**demo, "audioKey": f"demo-{index}.mp3", "coverKey": f"demo-{index}.jpg"}
            )
            track = create_track(
                owner.id,
                payload,
                storage_endpoint=app.config["STORAGE_ENDPOINT"],
                storage_bucket=app.config["STORAGE_BUCKET"],
                session=session,
            )
            ids[demo["title"]] = track.id
    return ids


@pytest.fixture
def make_profile(seed):
    def _make(**kwargs):
        with seed():
            profile = test_factories.ProfileFactory(**kwargs)
            profile_id = profile.id
        return profile_id

    return _make


@pytest.fixture
def profile_headers():
    def _headers(profile_id):
        return {"X-Profile-Id": profile_id}

    return _headers
