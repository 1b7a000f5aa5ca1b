# photogram/models/state.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from photogram.models.photo import Photo
from photogram.models.user import User


@dataclass(frozen=True)
class AppState:
    """
    클라이언트 전역 상태의 스냅샷.
    AppStore 만이 새 AppState 를 만들어 교체하며, 뷰는 읽기만 합니다.
    """
    user: Optional[User] = None
    photos: Tuple[Photo, ...] = field(default_factory=tuple)
    dark_mode: bool = False


@dataclass(frozen=True)
class Session:
    """Session Provider(Firebase Auth)가 돌려주는 인증된 사용자 식별 정보."""
    uid: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class SearchResults:
    """검색창에서만 쓰이는 일회성 결과. 스토어에 캐시하지 않습니다."""
    users: Tuple[User, ...] = field(default_factory=tuple)
    photos: Tuple[Photo, ...] = field(default_factory=tuple)


class UploadStatus(Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class UploadProgress:
    progress: float = 0.0
    status: UploadStatus = UploadStatus.COMPLETE
    error: Optional[str] = None
