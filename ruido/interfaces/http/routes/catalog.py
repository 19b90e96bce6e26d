"""Read-only catalog routes: tag vocabulary and profile pages."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ruido.database.db_manager import Profile, Track
from ruido.domain.search import (
    build_track_order_by,
    get_pagination,
    list_available_tags,
    serialize_tracks,
    total_pages,
)
from ruido.domain.tracks import LICENSE_LABELS

catalog_bp = Blueprint('catalog_bp', __name__, url_prefix='/api')


@catalog_bp.route('/tags', methods=['GET'])
def list_tags():
    return jsonify({'tags': list_available_tags()}), 200


@catalog_bp.route('/licenses', methods=['GET'])
def list_licenses():
    licenses = [{'value': value, 'label': label} for value, label in LICENSE_LABELS.items()]
    return jsonify({'licenses': licenses}), 200


@catalog_bp.route('/profiles/<handle>', methods=['GET'])
def profile_detail(handle: str):
    profile = Profile.query.filter_by(handle=handle.strip()).first()
    if profile is None:
        return jsonify({'error': 'not_found'}), 404

    pagination = get_pagination(request.args.get('page'))
    query = Track.query.filter(Track.profile_id == profile.id)
    total = query.count()
    tracks = (
        query.order_by(*build_track_order_by('newest'))
        .offset(pagination.skip)
        .limit(pagination.take)
        .all()
    )

    return (
        jsonify(
            {
                'profile': profile.to_dict(),
                'tracks': serialize_tracks(tracks),
                'pagination': {
                    'page': pagination.page,
                    'pageSize': pagination.take,
                    'total': total,
                    'totalPages': total_pages(total, pagination.take),
                },
            }
        ),
        200,
    )


__all__ = ['catalog_bp']
