# photogram/api/uploads/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

# 업로드 화면에서 고를 수 있는 CSS 필터 이름 ('' 는 필터 없음)
FILTERS = ['', 'filter-mono', 'filter-warm', 'filter-cool', 'filter-vintage']


class UploadFormSchema(Schema):
    """POST /api/uploads 의 multipart 폼 필드(파일 제외)를 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    caption = fields.Str(load_default='', validate=validate.Length(max=2200))
    filter = fields.Str(load_default='', validate=validate.OneOf(FILTERS, error="지원하지 않는 필터입니다."))


class UploadProgressSchema(Schema):
    progress = fields.Float()
    status = fields.Function(lambda p: p.status.value)
    error = fields.Str(allow_none=True)
