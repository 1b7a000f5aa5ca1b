# photogram/core/security.py
from functools import wraps
from flask import jsonify, current_app


def session_required(f):
    """로그인된 사용자가 없으면 스토어 작업을 호출하지 않고 401 을 반환합니다."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if current_app.services['store'].user is None:
            return jsonify({"error_code": "SESSION_REQUIRED", "message": "로그인이 필요합니다."}), 401
        return f(*args, **kwargs)

    return decorated_function
