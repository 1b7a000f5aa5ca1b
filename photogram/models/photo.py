# photogram/models/photo.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Dict, Any

from photogram.models.comment import Comment


class MediaKind(Enum):
    """업로드된 미디어의 종류"""
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class Media:
    """Photo 문서 내부에 저장될 미디어 정보."""
    type: MediaKind
    url: str
    thumbnail_url: Optional[str] = None  # 동영상일 때만, data URL
    duration: Optional[float] = None     # 초 단위
    size: Optional[int] = None           # 바이트 단위

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type.value, 'url': self.url}
        if self.thumbnail_url is not None:
            data['thumbnailUrl'] = self.thumbnail_url
        if self.duration is not None:
            data['duration'] = self.duration
        if self.size is not None:
            data['size'] = self.size
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Media':
        return cls(
            type=MediaKind(data.get('type', MediaKind.IMAGE.value)),
            url=data.get('url', ''),
            thumbnail_url=data.get('thumbnailUrl'),
            duration=data.get('duration'),
            size=data.get('size'),
        )


@dataclass(frozen=True)
class Photo:
    """
    Firestore 'photos' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID 는 본문에 저장하지 않습니다.
    """
    id: str
    user_id: str
    media: Media
    caption: str = ''
    likes: int = 0
    comments: Tuple[Comment, ...] = field(default_factory=tuple)
    filter: str = ''
    created_at: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'media': self.media.to_dict(),
            'caption': self.caption,
            'likes': self.likes,
            'comments': [c.to_dict() for c in self.comments],
            'userId': self.user_id,
            'filter': self.filter,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, doc_id: str, data: Dict[str, Any]) -> 'Photo':
        media_data = data.get('media')
        if media_data:
            media = Media.from_dict(media_data)
        else:
            # 초기 버전 문서는 media 맵 없이 최상위 url 만 가지고 있음
            media = Media(type=MediaKind.IMAGE, url=data.get('url', ''))

        return cls(
            id=doc_id,
            user_id=data.get('userId', ''),
            media=media,
            caption=data.get('caption') or '',
            likes=int(data.get('likes') or 0),
            comments=tuple(Comment.from_dict(c) for c in data.get('comments') or []),
            filter=data.get('filter') or '',
            created_at=data.get('createdAt') or '',
        )
