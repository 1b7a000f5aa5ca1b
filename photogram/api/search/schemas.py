# photogram/api/search/schemas.py
from marshmallow import Schema, fields

from photogram.api.feed.schemas import PhotoResponseSchema
from photogram.api.users.schemas import UserResponseSchema


class SearchResultsSchema(Schema):
    """GET /api/search 응답 스키마. 사용자와 게시물 결과를 함께 반환합니다."""
    users = fields.List(fields.Nested(UserResponseSchema))
    photos = fields.List(fields.Nested(PhotoResponseSchema))
