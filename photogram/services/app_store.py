# photogram/services/app_store.py
import logging
import threading
from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional, Tuple

from firebase_admin import firestore

from photogram.models.comment import Comment
from photogram.models.photo import Media, Photo
from photogram.models.state import AppState
from photogram.models.user import SocialLinks, User
from photogram.services.firestore_service import FirestoreService
from photogram.utils.datetime_utils import DateTimeUtils, now_iso

logger = logging.getLogger(__name__)

PHOTOS = 'photos'
USERS = 'users'

StateUpdate = Callable[[AppState], AppState]


def _map_photo(state: AppState, photo_id: str, update: Callable[[Photo], Photo]) -> AppState:
    """피드에서 photo_id 에 해당하는 사진만 새 값으로 바꾼 상태를 만듭니다."""
    photos = tuple(update(p) if p.id == photo_id else p for p in state.photos)
    return replace(state, photos=photos)


def _prepend_photo(state: AppState, photo: Photo) -> AppState:
    return replace(state, photos=(photo,) + state.photos)


class AppStore:
    """
    현재 사용자와 피드를 보관하는 클라이언트 상태 저장소.

    - 상태(AppState)를 바꾸거나 원격 문서 저장소에 쓰기를 요청할 수 있는 유일한 컴포넌트입니다.
    - 원격 효과가 있는 모든 작업은 perform_write 를 거칩니다.
      원격 쓰기가 성공한 뒤에만 로컬 캐시를 갱신하고, 실패하면 로그만 남기고 상태는 그대로 둡니다.
    - 상태는 항상 통째로 교체되므로 읽는 쪽이 반쯤 갱신된 값을 보는 일은 없습니다.
    """

    def __init__(self, firestore_service: FirestoreService):
        self.firestore = firestore_service
        self._state = AppState()
        self._lock = threading.Lock()

    # --- 읽기 전용 접근자 ---
    @property
    def state(self) -> AppState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def photos(self) -> Tuple[Photo, ...]:
        return self._state.photos

    @property
    def dark_mode(self) -> bool:
        return self._state.dark_mode

    def get_photo(self, photo_id: str) -> Optional[Photo]:
        return next((p for p in self._state.photos if p.id == photo_id), None)

    # --- 상태 교체 ---
    def _replace(self, update: StateUpdate) -> AppState:
        # 원격 호출은 절대 이 락 안에서 하지 않습니다.
        with self._lock:
            self._state = update(self._state)
            return self._state

    def perform_write(self, remote_call: Callable[[], None], local_apply: StateUpdate, action: str) -> bool:
        """
        원격 쓰기 → (성공 시) 로컬 반영의 2단계 작업을 수행합니다.

        :param remote_call: 원격 저장소에 대한 쓰기. 예외를 던지면 실패로 간주합니다.
        :param local_apply: 현재 상태를 받아 새 상태를 돌려주는 함수. 원격 쓰기가 성공했을 때만 호출됩니다.
        :param action: 로그에 남길 작업 설명
        :return: 원격 쓰기 성공 여부. 실패는 호출자에게 예외로 전달되지 않습니다.
        """
        try:
            remote_call()
        except Exception as e:
            logger.error(f"{action} 실패: {e}", exc_info=True)
            return False

        self._replace(local_apply)
        return True

    # --- 로컬 전용 작업 ---
    def set_session(self, user: Optional[User]) -> None:
        """세션 변경 시 호출됩니다. 원격 효과 없음."""
        self._replace(lambda state: replace(state, user=user))

    def set_feed(self, photos: Iterable[Photo]) -> None:
        """전체 조회 결과로 피드를 통째로 교체합니다. 이전 피드와 병합하지 않습니다."""
        snapshot = tuple(photos)
        self._replace(lambda state: replace(state, photos=snapshot))

    def add_photo(self, photo: Photo) -> None:
        """이미 원격에 저장된 사진을 피드 맨 앞에 추가합니다. 로컬 캐시 갱신일 뿐 쓰기가 아닙니다."""
        self._replace(lambda state: _prepend_photo(state, photo))

    def toggle_dark_mode(self) -> bool:
        return self._replace(lambda state: replace(state, dark_mode=not state.dark_mode)).dark_mode

    # --- 사진 ---
    def like_photo(self, photo_id: str) -> bool:
        """
        사진의 좋아요 수를 1 올립니다.
        같은 사용자의 중복 좋아요는 막지 않습니다. (likedBy 는 기록만 하고 확인하지 않음)
        """
        user = self.user
        if not user:
            return False

        def remote():
            self.firestore.update_document(PHOTOS, photo_id, {
                'likes': firestore.Increment(1),
                'likedBy': firestore.ArrayUnion([user.id]),
            })

        return self.perform_write(
            remote,
            lambda state: _map_photo(state, photo_id, lambda p: replace(p, likes=p.likes + 1)),
            f"사진 좋아요 (photo_id: {photo_id})",
        )

    def add_comment(self, photo_id: str, content: str) -> Optional[Comment]:
        """사진에 댓글을 추가합니다. 로그인하지 않았거나 내용이 비어 있으면 아무 것도 하지 않습니다."""
        user = self.user
        text = (content or '').strip()
        if not user or not text:
            return None

        created = DateTimeUtils.now()
        comment = Comment(
            id=str(DateTimeUtils.to_timestamp_ms(created)),
            user_id=user.id,
            username=user.username,
            avatar=user.avatar,
            content=text,
            created_at=DateTimeUtils.to_iso_string(created),
        )

        def remote():
            self.firestore.update_document(PHOTOS, photo_id, {
                'comments': firestore.ArrayUnion([comment.to_dict()]),
            })

        ok = self.perform_write(
            remote,
            lambda state: _map_photo(state, photo_id, lambda p: replace(p, comments=p.comments + (comment,))),
            f"댓글 작성 (photo_id: {photo_id})",
        )
        return comment if ok else None

    def publish_photo(self, media: Media, caption: str = '', filter_name: str = '') -> Optional[Photo]:
        """
        업로드가 끝난 미디어로 photos 문서를 만들고, 생성에 성공하면 피드 맨 앞에 추가합니다.
        """
        user = self.user
        if not user:
            return None

        draft = Photo(
            id='',
            user_id=user.id,
            media=media,
            caption=caption,
            filter=filter_name,
            created_at=now_iso(),
        )
        created = []

        def remote():
            doc_id = self.firestore.create_document(PHOTOS, draft.to_dict())
            created.append(replace(draft, id=doc_id))

        ok = self.perform_write(
            remote,
            lambda state: _prepend_photo(state, created[0]),
            f"사진 게시 (user_id: {user.id})",
        )
        return created[0] if ok else None

    # --- 프로필 ---
    def update_profile(self, username: str, bio: Optional[str] = None, website: Optional[str] = None,
                       social: Optional[Dict[str, Optional[str]]] = None) -> bool:
        """현재 사용자의 프로필을 수정합니다. 사용자명이 비어 있으면 아무 것도 하지 않습니다."""
        user = self.user
        name = (username or '').strip()
        if not user or not name:
            return False

        social = social or {}
        links = SocialLinks(
            instagram=(social.get('instagram') or '').strip(),
            twitter=(social.get('twitter') or '').strip(),
            facebook=(social.get('facebook') or '').strip(),
        )
        fields = {
            'username': name,
            'bio': (bio or '').strip(),
            'website': (website or '').strip(),
        }

        def apply(state: AppState) -> AppState:
            if not state.user or state.user.id != user.id:
                return state
            return replace(state, user=replace(state.user, social=links, **fields))

        return self.perform_write(
            lambda: self.firestore.update_document(USERS, user.id, {**fields, 'social': links.to_dict()}),
            apply,
            f"프로필 수정 (user_id: {user.id})",
        )

    def update_avatar(self, avatar_url: str) -> bool:
        user = self.user
        if not user or not avatar_url:
            return False

        def apply(state: AppState) -> AppState:
            if not state.user or state.user.id != user.id:
                return state
            return replace(state, user=replace(state.user, avatar=avatar_url))

        return self.perform_write(
            lambda: self.firestore.update_document(USERS, user.id, {'avatar': avatar_url}),
            apply,
            f"프로필 이미지 변경 (user_id: {user.id})",
        )

    # --- 팔로우 ---
    def follow_user(self, target_id: str) -> bool:
        user = self.user
        if not user or target_id == user.id:
            return False
        return self._write_follow_edge(user, target_id, follow=True)

    def unfollow_user(self, target_id: str) -> bool:
        user = self.user
        if not user or target_id == user.id:
            return False
        return self._write_follow_edge(user, target_id, follow=False)

    def _fetch_target(self, target_id: str) -> Optional[User]:
        try:
            data = self.firestore.get_document(USERS, target_id)
        except Exception as e:
            logger.error(f"팔로우 대상 사용자 조회 실패 (target: {target_id}): {e}", exc_info=True)
            return None
        if data is None:
            logger.warning(f"팔로우 대상 사용자를 찾을 수 없음 (target: {target_id})")
            return None
        return User.from_dict(target_id, data)

    def _write_follow_edge(self, user: User, target_id: str, follow: bool) -> bool:
        """
        팔로우 관계는 두 문서(내 문서, 대상 문서)에 대한 독립적인 update 두 번으로 기록됩니다.
        두 쓰기 사이에는 원자성이 없으므로 2단계가 실패하면 두 문서가 어긋난 채로 남습니다.

        각 단계는 그 문서의 목록(내 followingList, 대상의 followersList)이 실제로 바뀌어야 할 때만 수행합니다.
        그래서 어긋난 상태에서 다시 팔로우하면 빠진 쪽만 채워지고, 언팔로우는 목록에 없는 쪽의 카운터를 줄이지 않습니다.
        """
        target = self._fetch_target(target_id)
        if target is None:
            return False

        own_pending = user.is_following(target_id) != follow
        target_pending = target.is_followed_by(user.id) != follow
        if not own_pending and not target_pending:
            return False

        delta = 1 if follow else -1
        list_op = firestore.ArrayUnion if follow else firestore.ArrayRemove
        action = "팔로우" if follow else "언팔로우"

        def apply_own(state: AppState) -> AppState:
            current = state.user
            if not current or current.id != user.id:
                return state
            following_list = tuple(uid for uid in (current.following_list or ()) if uid != target_id)
            if follow:
                following_list += (target_id,)
            return replace(state, user=replace(
                current,
                following=max(0, current.following + delta),
                following_list=following_list,
            ))

        # 1단계: 내 문서
        if own_pending:
            own_ok = self.perform_write(
                lambda: self.firestore.update_document(USERS, user.id, {
                    'following': firestore.Increment(delta),
                    'followingList': list_op([target_id]),
                }),
                apply_own,
                f"{action} 1단계 (user_id: {user.id}, target: {target_id})",
            )
            if not own_ok:
                return False

        if not target_pending:
            return True

        # 2단계: 대상 문서. 대상 사용자는 캐시하지 않으므로 로컬 반영할 것이 없습니다.
        return self.perform_write(
            lambda: self.firestore.update_document(USERS, target_id, {
                'followers': firestore.Increment(delta),
                'followersList': list_op([user.id]),
            }),
            lambda state: state,
            f"{action} 2단계 - 1단계만 반영되어 문서가 불일치 상태 (user_id: {user.id}, target: {target_id})",
        )

    def reconcile_follow_counts(self, user_id: str) -> bool:
        """
        사용자 문서의 followers/following 카운터를 followersList/followingList 길이에 맞춥니다.
        목록 필드가 없는 카운터는 건드리지 않습니다.
        """
        try:
            data = self.firestore.get_document(USERS, user_id)
        except Exception as e:
            logger.error(f"팔로우 카운터 점검 중 사용자 조회 실패 (user_id: {user_id}): {e}", exc_info=True)
            return False
        if data is None:
            logger.warning(f"팔로우 카운터 점검 대상 사용자를 찾을 수 없음 (user_id: {user_id})")
            return False

        stored = User.from_dict(user_id, data)
        updates = {}
        if stored.followers_list is not None and stored.followers != len(stored.followers_list):
            updates['followers'] = len(stored.followers_list)
        if stored.following_list is not None and stored.following != len(stored.following_list):
            updates['following'] = len(stored.following_list)
        if not updates:
            return True

        reconciled = replace(stored, **updates)
        logger.info(f"팔로우 카운터 보정 (user_id: {user_id}): {updates}")

        def apply(state: AppState) -> AppState:
            if not state.user or state.user.id != user_id:
                return state
            return replace(state, user=reconciled)

        return self.perform_write(
            lambda: self.firestore.update_document(USERS, user_id, updates),
            apply,
            f"팔로우 카운터 보정 (user_id: {user_id})",
        )
