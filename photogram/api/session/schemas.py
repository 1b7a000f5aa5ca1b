# photogram/api/session/schemas.py
from marshmallow import Schema, fields


class SignInSchema(Schema):
    """POST /api/session 요청 본문. 클라이언트가 Firebase Auth 로 받은 ID 토큰."""
    id_token = fields.Str(required=True, error_messages={"required": "ID 토큰은 필수 항목입니다."})
