# photogram/api/feed/services.py
import logging
from typing import List, Optional

from photogram.models.photo import Photo
from photogram.models.user import User
from photogram.services.firestore_service import FirestoreService


class FeedService:
    """
    피드/상세 화면의 읽기 흐름을 담당하는 서비스 클래스.
    조회만 하며 스토어 상태는 바꾸지 않습니다. (반영은 라우트가 스토어 작업으로 수행)
    """
    def __init__(self, firestore_service: FirestoreService):
        self.firestore = firestore_service

    def fetch_feed(self) -> Optional[List[Photo]]:
        """모든 사진을 작성일 내림차순으로 조회합니다. 실패 시 None."""
        try:
            docs = self.firestore.query_documents('photos', order_by='createdAt', descending=True)
        except Exception as e:
            logging.error(f"피드 조회 실패: {e}", exc_info=True)
            return None
        return [Photo.from_dict(doc['id'], doc) for doc in docs]

    def fetch_user(self, user_id: str) -> Optional[User]:
        """
        상세 화면을 열 때 게시물 작성자 정보를 캐시가 아닌 원격에서 새로 읽습니다.
        없거나 조회에 실패하면 None.
        """
        try:
            user_data = self.firestore.get_document('users', user_id)
        except Exception as e:
            logging.error(f"작성자 정보 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            return None
        return User.from_dict(user_id, user_data) if user_data else None
