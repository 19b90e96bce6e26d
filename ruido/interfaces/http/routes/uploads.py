"""Upload completion: persist track metadata once the audio object is stored."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError

from ruido.database.db_manager import db
from ruido.domain.search import serialize_track
from ruido.domain.tracks import create_track
from ruido.models.dto import UploadCompleteDTO, validation_details

logger = logging.getLogger(__name__)

upload_bp = Blueprint('upload_bp', __name__, url_prefix='/api/uploads')


def _create(payload: UploadCompleteDTO):
    return create_track(
        current_user.id,
        payload,
        storage_endpoint=current_app.config['STORAGE_ENDPOINT'],
        storage_bucket=current_app.config['STORAGE_BUCKET'],
    )


@upload_bp.route('/complete', methods=['POST'])
@login_required
def complete_upload():
    try:
        payload = UploadCompleteDTO.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({'error': 'invalid_parameters', 'details': validation_details(exc)}), 400

    try:
        track = _create(payload)
    except DataError as exc:
        # a value the columns cannot hold, e.g. a url longer than the storage prefix allows
        db.session.rollback()
        logger.warning("Upload rejected by the database: %s", exc)
        return jsonify({'error': 'invalid_parameters'}), 400
    except IntegrityError:
        # A concurrent upload created one of our tags; it now exists, so retry once
        db.session.rollback()
        logger.info("Retrying upload after concurrent tag creation")
        try:
            track = _create(payload)
        except IntegrityError as exc:
            db.session.rollback()
            logger.error("Upload could not be persisted: %s", exc, exc_info=True)
            return jsonify({'error': 'unable_to_create_track'}), 409

    return jsonify({'track': serialize_track(track)}), 201


__all__ = ['upload_bp']
