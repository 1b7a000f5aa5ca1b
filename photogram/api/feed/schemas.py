# photogram/api/feed/schemas.py
from marshmallow import Schema, fields, validate, validates, ValidationError

from photogram.utils.media_utils import format_file_size


# --- 재사용을 위한 중첩 스키마 ---
class MediaSchema(Schema):
    """사진/동영상 미디어 정보 스키마."""
    type = fields.Function(lambda media: media.type.value)
    url = fields.Str(required=True)
    thumbnail_url = fields.Str(allow_none=True)
    duration = fields.Float(allow_none=True)
    size = fields.Int(allow_none=True)
    # 화면 표시용 (예: "1.50 MB")
    size_label = fields.Function(lambda media: format_file_size(media.size) if media.size is not None else None)


class CommentResponseSchema(Schema):
    """댓글 응답 스키마. 작성자 정보는 작성 당시의 사본입니다."""
    id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    username = fields.Str(required=True)
    avatar = fields.Str(allow_none=True)
    content = fields.Str(required=True)
    created_at = fields.Str(required=True)


class PhotoResponseSchema(Schema):
    """피드/상세 화면에서 사용하는 게시물 응답 스키마."""
    id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    media = fields.Nested(MediaSchema, required=True)
    caption = fields.Str()
    likes = fields.Int(required=True)
    comments = fields.List(fields.Nested(CommentResponseSchema))
    filter = fields.Str()
    created_at = fields.Str(required=True)


# --- 요청 스키마 ---
class CommentCreateSchema(Schema):
    """POST /api/photos/{photo_id}/comments 요청 본문의 유효성을 검사합니다."""
    content = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))

    @validates('content')
    def validate_not_blank(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("댓글 내용을 입력해주세요.")
