# photogram/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app

from photogram.api.feed.schemas import PhotoResponseSchema
from photogram.api.users.schemas import UserResponseSchema, ProfileUpdateSchema
from photogram.core.security import session_required

users_bp = Blueprint('users_bp', __name__)


def _current_user_response(applied: bool):
    store = current_app.services['store']
    return jsonify({"applied": applied, "user": UserResponseSchema().dump(store.user)}), 200


@users_bp.route('/<string:user_id>', methods=['GET'])
def get_user_profile(user_id: str):
    """특정 사용자의 프로필과 게시물 목록, 현재 사용자의 팔로우 여부를 조회합니다."""
    user_service = current_app.services['users']
    store = current_app.services['store']
    try:
        profile = user_service.get_profile(user_id, store.user.id if store.user else None)
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500

    if not profile:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404

    return jsonify({
        "user": UserResponseSchema().dump(profile['user']),
        "photos": PhotoResponseSchema(many=True).dump(profile['photos']),
        "is_following": profile['is_following'],
    }), 200


@users_bp.route('/<string:user_id>/follow', methods=['POST'])
@session_required
def follow_user(user_id: str):
    """
    사용자를 팔로우합니다.
    자기 자신이거나 이미 팔로우 중이면 아무 것도 하지 않고 applied=false 를 반환합니다.
    """
    applied = current_app.services['store'].follow_user(user_id)
    return _current_user_response(applied)


@users_bp.route('/<string:user_id>/follow', methods=['DELETE'])
@session_required
def unfollow_user(user_id: str):
    applied = current_app.services['store'].unfollow_user(user_id)
    return _current_user_response(applied)


@users_bp.route('/me', methods=['PATCH'])
@session_required
def update_my_profile():
    """현재 사용자의 프로필(사용자명, 소개, 웹사이트, 소셜 링크)을 수정합니다."""
    store = current_app.services['store']
    data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})

    applied = store.update_profile(
        data['username'],
        bio=data.get('bio'),
        website=data.get('website'),
        social=data.get('social'),
    )
    return _current_user_response(applied)


@users_bp.route('/me/avatar', methods=['POST'])
@session_required
def update_my_avatar():
    """
    프로필 이미지를 업로드하고 사용자 문서의 avatar 를 교체합니다.
    - multipart/form-data 의 'file' 필드로 이미지 파일을 받습니다.
    """
    store = current_app.services['store']
    storage_service = current_app.services['storage']

    file = request.files.get('file')
    if file is None or not (file.mimetype or '').startswith('image/'):
        return jsonify({"error_code": "INVALID_MEDIA", "message": "이미지 파일만 업로드할 수 있습니다."}), 400

    user = store.user
    try:
        path = storage_service.build_path('avatar', user.id, file.filename or 'avatar')
        url = storage_service.upload_bytes(path, file.read(), file.mimetype)
    except Exception as e:
        logging.error(f"프로필 이미지 업로드 실패 (user_id: {user.id}): {e}", exc_info=True)
        return jsonify({"error_code": "AVATAR_UPLOAD_FAILED", "message": "프로필 이미지 업로드에 실패했습니다."}), 502

    applied = store.update_avatar(url)
    return _current_user_response(applied)


@users_bp.route('/<string:user_id>/reconcile', methods=['POST'])
@session_required
def reconcile_follow_counts(user_id: str):
    """팔로워/팔로잉 카운터를 목록 길이에 맞게 보정합니다."""
    store = current_app.services['store']
    applied = store.reconcile_follow_counts(user_id)
    return jsonify({"applied": applied}), 200
