# photogram/api/session/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app

from photogram.api.session.schemas import SignInSchema
from photogram.api.users.schemas import UserResponseSchema

session_bp = Blueprint('session_bp', __name__)


def _session_response(status: int = 200):
    store = current_app.services['store']
    user = store.user
    return jsonify({
        "user": UserResponseSchema().dump(user) if user else None,
        "dark_mode": store.dark_mode,
    }), status


@session_bp.route('', methods=['GET'])
def get_session():
    """현재 세션 사용자와 다크 모드 설정을 반환합니다."""
    return _session_response()


@session_bp.route('', methods=['POST'])
def sign_in():
    """
    Firebase ID 토큰으로 로그인합니다.
    - 세션이 바뀌면 리스너가 사용자 문서를 읽어(없으면 생성) 스토어의 user 를 교체합니다.
    """
    session_service = current_app.services['session']
    store = current_app.services['store']
    data = SignInSchema().load(request.get_json(silent=True) or {})

    session = session_service.sign_in(data['id_token'])
    if session is None:
        return jsonify({"error_code": "INVALID_ID_TOKEN", "message": "유효하지 않은 ID 토큰입니다."}), 401

    if store.user is None:
        logging.error(f"로그인은 되었으나 사용자 문서를 동기화하지 못했습니다 (uid: {session.uid})")
        # 세션과 스토어가 어긋나지 않도록 로그인 상태를 되돌립니다.
        session_service.sign_out()
        return jsonify({"error_code": "SESSION_SYNC_FAILED", "message": "사용자 정보를 불러오지 못했습니다."}), 502

    return _session_response()


@session_bp.route('', methods=['DELETE'])
def sign_out():
    current_app.services['session'].sign_out()
    return Response(status=204)


@session_bp.route('/dark-mode', methods=['POST'])
def toggle_dark_mode():
    """다크 모드를 토글합니다. 로컬 설정이며 원격에는 저장하지 않습니다."""
    dark_mode = current_app.services['store'].toggle_dark_mode()
    return jsonify({"dark_mode": dark_mode}), 200
