# photogram/api/users/schemas.py
from marshmallow import Schema, fields, validate, validates, ValidationError


class SocialLinksSchema(Schema):
    instagram = fields.Str(allow_none=True)
    twitter = fields.Str(allow_none=True)
    facebook = fields.Str(allow_none=True)


class UserResponseSchema(Schema):
    """
    사용자 프로필 응답 스키마.
    followers_list/following_list 는 팔로우 여부 표시에 사용됩니다.
    """
    id = fields.Str(required=True)
    username = fields.Str(required=True)
    avatar = fields.Str(allow_none=True)
    bio = fields.Str(allow_none=True)
    website = fields.Str(allow_none=True)
    social = fields.Nested(SocialLinksSchema)
    followers = fields.Int(required=True)
    following = fields.Int(required=True)
    followers_list = fields.List(fields.Str(), allow_none=True)
    following_list = fields.List(fields.Str(), allow_none=True)


class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me 요청 본문의 유효성을 검사합니다."""
    username = fields.Str(required=True, validate=validate.Length(min=1, max=30),
                          error_messages={"required": "사용자명은 필수 항목입니다."})
    bio = fields.Str(load_default='', validate=validate.Length(max=500))
    website = fields.Str(load_default='')
    social = fields.Nested(SocialLinksSchema, load_default=dict)

    @validates('username')
    def validate_not_blank(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("사용자명을 입력해주세요.")
