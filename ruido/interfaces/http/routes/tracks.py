"""Track search, detail, edit and counter routes."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ruido.domain.search import (
    SearchBackendError,
    SearchQueryError,
    TrackSearchParams,
    TrackSearchService,
    build_search_response,
    coerce_page,
    list_available_tags,
    normalize_sort,
    serialize_track,
)
from ruido.domain.tracks import (
    TrackNotFoundError,
    get_track,
    is_license_allowed,
    normalize_tag,
    record_play,
    toggle_like,
    update_track,
)
from ruido.models.dto import TrackUpdateDTO, validation_details

logger = logging.getLogger(__name__)

track_bp = Blueprint('track_bp', __name__, url_prefix='/api/tracks')

SEARCH_ERROR_MESSAGE = "Unable to load tracks"


def _search_service() -> TrackSearchService:
    service = current_app.extensions.get('track_search')
    if service is None:
        service = TrackSearchService()
    return service


def _optional_arg(name: str) -> str | None:
    value = request.args.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@track_bp.route('', methods=['GET'])
def search_tracks():
    license_value = _optional_arg('license')
    if license_value is not None and not is_license_allowed(license_value):
        return jsonify({'error': 'invalid_license'}), 400

    raw_tag = _optional_arg('tag')
    params = TrackSearchParams(
        query=request.args.get('query'),
        tag=normalize_tag(raw_tag) or None,
        license=license_value,
        sort=normalize_sort(request.args.get('sort')),
        page=coerce_page(request.args.get('page')),
    )

    try:
        page = _search_service().search(params)
        available_tags = list_available_tags()
    except SearchQueryError as exc:
        logger.info("Rejected search query: %s", exc)
        return jsonify({'error': SEARCH_ERROR_MESSAGE, 'detail': str(exc)}), 400
    except SearchBackendError as exc:
        return jsonify({'error': SEARCH_ERROR_MESSAGE}), exc.status_code
    except SQLAlchemyError as exc:
        logger.error("Failed to load available tags: %s", exc, exc_info=True)
        return jsonify({'error': SEARCH_ERROR_MESSAGE}), 500

    return jsonify(build_search_response(page, available_tags)), 200


@track_bp.route('/<track_id>', methods=['GET'])
def track_detail(track_id: str):
    track = get_track(track_id)
    if track is None:
        return jsonify({'error': 'not_found'}), 404
    payload = serialize_track(track)
    payload['waveform'] = track.waveform or []
    return jsonify({'track': payload}), 200


@track_bp.route('/<track_id>', methods=['PATCH'])
@login_required
def edit_track(track_id: str):
    track = get_track(track_id)
    if track is None:
        return jsonify({'error': 'not_found'}), 404
    if track.profile_id != current_user.id:
        return jsonify({'error': 'forbidden'}), 403

    try:
        changes = TrackUpdateDTO.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({'error': 'invalid_parameters', 'details': validation_details(exc)}), 400

    track = update_track(track, changes)
    return jsonify({'track': serialize_track(track)}), 200


@track_bp.route('/<track_id>/like', methods=['POST'])
@login_required
def like_track(track_id: str):
    try:
        result = toggle_like(current_user.id, track_id)
    except TrackNotFoundError:
        return jsonify({'error': 'not_found'}), 404
    return jsonify({'liked': result.liked, 'likes': result.likes}), 200


@track_bp.route('/<track_id>/play', methods=['POST'])
def play_track(track_id: str):
    try:
        record_play(track_id)
    except TrackNotFoundError:
        return jsonify({'error': 'not_found'}), 404
    return '', 204


__all__ = ['track_bp']
