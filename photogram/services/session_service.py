# photogram/services/session_service.py
import logging
from typing import Callable, List, Optional

from firebase_admin import auth as firebase_auth

from photogram.models.state import Session
from photogram.models.user import User
from photogram.services.firestore_service import FirestoreService

SessionListener = Callable[[Optional[Session]], None]


class SessionService:
    """
    Firebase Authentication 세션을 관리하는 서비스 클래스.
    - 클라이언트가 받은 ID 토큰을 검증하여 세션을 시작합니다.
    - 세션이 바뀔 때마다 등록된 리스너(on_session_change)에게 알립니다.
    """

    def __init__(self, firestore_service: FirestoreService,
                 verify_token: Optional[Callable[[str], dict]] = None):
        """
        :param firestore_service: 사용자 문서 조회/생성에 사용
        :param verify_token: ID 토큰 검증 함수. 기본값은 firebase_admin.auth.verify_id_token
        """
        self.firestore = firestore_service
        self._verify_token = verify_token or firebase_auth.verify_id_token
        self._session: Optional[Session] = None
        self._listeners: List[SessionListener] = []

    @property
    def current_session(self) -> Optional[Session]:
        return self._session

    def on_session_change(self, listener: SessionListener) -> Callable[[], None]:
        """
        세션 변경 리스너를 등록합니다. 등록 즉시 현재 세션으로 한 번 호출됩니다.
        :return: 등록 해제 함수
        """
        self._listeners.append(listener)
        listener(self._session)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._session)
            except Exception as e:
                logging.error(f"세션 변경 리스너 처리 중 오류 발생: {e}", exc_info=True)

    def sign_in(self, id_token: str) -> Optional[Session]:
        """ID 토큰을 검증하고 세션을 시작합니다. 실패하면 None."""
        try:
            claims = self._verify_token(id_token)
        except Exception as e:
            logging.error(f"로그인 실패: ID 토큰 검증 중 오류 발생 - {e}", exc_info=True)
            return None

        self._session = Session(
            uid=claims['uid'],
            display_name=claims.get('name'),
            photo_url=claims.get('picture'),
        )
        logging.info(f"로그인 성공 (uid: {self._session.uid})")
        self._notify()
        return self._session

    def sign_out(self) -> None:
        self._session = None
        logging.info("로그아웃 처리 완료")
        self._notify()

    def resolve_user(self, session: Optional[Session]) -> Optional[User]:
        """
        세션에 해당하는 사용자 문서를 가져옵니다.
        최초 로그인이면 세션의 이름/프로필 이미지로 기본 사용자 문서를 만듭니다.
        """
        if session is None:
            return None

        try:
            user_data = self.firestore.get_document('users', session.uid)
            if user_data:
                return User.from_dict(session.uid, user_data)

            new_user = User(
                id=session.uid,
                username=session.display_name or '',
                avatar=session.photo_url,
                followers=0,
                following=0,
            )
            self.firestore.set_document('users', session.uid, new_user.to_dict())
            logging.info(f"신규 사용자 문서 생성 (uid: {session.uid})")
            return new_user
        except Exception as e:
            logging.error(f"세션 사용자 조회/생성 실패 (uid: {session.uid}): {e}", exc_info=True)
            return None
