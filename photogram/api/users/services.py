# photogram/api/users/services.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from photogram.models.photo import Photo
from photogram.models.user import User
from photogram.services.firestore_service import FirestoreService
from photogram.utils.datetime_utils import parse_iso

# createdAt 이 없는 초기 버전 문서는 가장 오래된 것으로 취급
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_at_key(photo: Photo) -> datetime:
    """
    createdAt 을 시각으로 비교합니다.
    다른 오프셋(+09:00 등)으로 저장된 문서가 섞여 있으면 문자열 순서와 시간 순서가 다를 수 있습니다.
    """
    if not photo.created_at:
        return _OLDEST
    try:
        return parse_iso(photo.created_at)
    except ValueError:
        return _OLDEST


class UserService:
    """
    프로필 화면의 조회를 담당하는 서비스 클래스.
    프로필 수정/팔로우 같은 쓰기는 모두 AppStore 작업으로 수행되며 여기서는 읽기만 합니다.
    """
    def __init__(self, firestore_service: FirestoreService):
        self.firestore = firestore_service

    def get_profile(self, user_id: str, viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        사용자 문서와 그 사용자가 올린 게시물을 조회합니다.

        :param user_id: 조회할 사용자 ID
        :param viewer_id: 현재 로그인한 사용자 ID. 팔로우 여부는 대상 사용자의 followersList 로 판단합니다.
        :return: {"user", "photos", "is_following"} 또는 사용자가 없으면 None
        """
        try:
            user_data = self.firestore.get_document('users', user_id)
            if not user_data:
                return None

            docs = self.firestore.query_documents('photos', filters=[('userId', '==', user_id)])
        except Exception as e:
            logging.error(f"프로필 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise

        # 복합 색인 없이 조회하므로 정렬은 여기서 합니다.
        photos = sorted(
            (Photo.from_dict(doc['id'], doc) for doc in docs),
            key=_created_at_key,
            reverse=True,
        )
        user = User.from_dict(user_id, user_data)
        return {
            "user": user,
            "photos": photos,
            "is_following": bool(viewer_id) and user.is_followed_by(viewer_id),
        }
