# photogram/api/search/services.py
import logging
from typing import List

from photogram.models.photo import Photo
from photogram.models.state import SearchResults
from photogram.models.user import User
from photogram.services.firestore_service import FirestoreService, QueryFilter

# 접두사 범위 검색의 상한 문자. [value, value + HIGH_SENTINEL] 범위가 "value 로 시작" 과 같습니다.
HIGH_SENTINEL = '\uf8ff'


def prefix_range(field_path: str, prefix: str) -> List[QueryFilter]:
    return [
        (field_path, '>=', prefix),
        (field_path, '<=', prefix + HIGH_SENTINEL),
    ]


class SearchService:
    """
    헤더 검색창의 사용자/게시물 검색을 담당합니다.
    결과는 일회성이며 스토어에 저장하지 않습니다.
    """
    def __init__(self, firestore_service: FirestoreService, min_length: int = 2):
        self.firestore = firestore_service
        self.min_length = min_length

    def search(self, text: str) -> SearchResults:
        """
        사용자명(소문자 접두사)과 캡션(접두사)으로 각각 조회한 결과를 합칩니다.
        검색어가 최소 길이보다 짧거나 조회에 실패하면 빈 결과를 반환합니다.
        """
        text = text or ''
        if len(text) < self.min_length:
            return SearchResults()

        try:
            users, photos = self._query_users(text.lower()), self._query_photos(text)
        except Exception as e:
            logging.error(f"검색 실패 (query: {text}): {e}", exc_info=True)
            return SearchResults()

        return SearchResults(users=tuple(users), photos=tuple(photos))

    def _query_users(self, prefix: str) -> List[User]:
        docs = self.firestore.query_documents('users', filters=prefix_range('username', prefix))
        return [User.from_dict(doc['id'], doc) for doc in docs]

    def _query_photos(self, prefix: str) -> List[Photo]:
        docs = self.firestore.query_documents('photos', filters=prefix_range('caption', prefix))
        return [Photo.from_dict(doc['id'], doc) for doc in docs]
