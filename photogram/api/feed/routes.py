# photogram/api/feed/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app

from photogram.api.feed.schemas import PhotoResponseSchema, CommentCreateSchema, CommentResponseSchema
from photogram.api.users.schemas import UserResponseSchema
from photogram.core.security import session_required

feed_bp = Blueprint('feed_bp', __name__)


@feed_bp.route('/feed', methods=['GET'])
def get_feed():
    """스토어에 캐시된 피드를 그대로 반환합니다. (원격 조회 없음)"""
    store = current_app.services['store']
    return jsonify({"photos": PhotoResponseSchema(many=True).dump(store.photos)}), 200


@feed_bp.route('/feed/refresh', methods=['POST'])
def refresh_feed():
    """
    전체 피드를 원격에서 다시 조회하여 스토어의 피드를 교체합니다.
    조회에 실패하면 기존 피드는 그대로 유지됩니다.
    """
    store = current_app.services['store']
    feed_service = current_app.services['feed']

    photos = feed_service.fetch_feed()
    if photos is None:
        return jsonify({"error_code": "FEED_FETCH_FAILED", "message": "피드를 불러오지 못했습니다."}), 502

    store.set_feed(photos)
    return jsonify({"photos": PhotoResponseSchema(many=True).dump(store.photos)}), 200


@feed_bp.route('/photos/<string:photo_id>', methods=['GET'])
def get_photo_detail(photo_id: str):
    """
    게시물 상세 정보를 조회합니다.
    - 게시물은 캐시된 피드에서 찾고, 작성자 정보는 최신 상태를 위해 원격에서 새로 읽습니다.
    """
    store = current_app.services['store']
    feed_service = current_app.services['feed']

    photo = store.get_photo(photo_id)
    if not photo:
        return jsonify({"error_code": "PHOTO_NOT_FOUND", "message": "게시물을 찾을 수 없습니다."}), 404

    owner = feed_service.fetch_user(photo.user_id)
    return jsonify({
        "photo": PhotoResponseSchema().dump(photo),
        "owner": UserResponseSchema().dump(owner) if owner else None
    }), 200


@feed_bp.route('/photos/<string:photo_id>/like', methods=['POST'])
@session_required
def like_photo(photo_id: str):
    """
    게시물에 좋아요를 누릅니다.
    원격 반영에 실패해도 사용자에게는 오류를 표시하지 않으며 applied=false 로만 알려줍니다.
    """
    store = current_app.services['store']
    applied = store.like_photo(photo_id)
    if not applied:
        logging.info(f"좋아요가 반영되지 않았습니다 (photo_id: {photo_id})")

    photo = store.get_photo(photo_id)
    return jsonify({
        "applied": applied,
        "photo": PhotoResponseSchema().dump(photo) if photo else None
    }), 200


@feed_bp.route('/photos/<string:photo_id>/comments', methods=['POST'])
@session_required
def create_comment(photo_id: str):
    """게시물에 댓글을 작성합니다. 내용 검증 오류는 전역 핸들러가 400 으로 응답합니다."""
    store = current_app.services['store']
    data = CommentCreateSchema().load(request.get_json(silent=True) or {})

    comment = store.add_comment(photo_id, data['content'])
    if comment is None:
        return jsonify({"applied": False, "comment": None}), 200
    return jsonify({"applied": True, "comment": CommentResponseSchema().dump(comment)}), 201
