# photogram/models/comment.py
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class Comment:
    """
    Photo 문서의 'comments' 배열에 임베드되는 댓글 구조.
    작성자 정보(username, avatar)는 작성 시점의 사본입니다.
    """
    id: str
    user_id: str
    username: str
    content: str
    created_at: str
    avatar: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'username': self.username,
            'avatar': self.avatar,
            'content': self.content,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Comment':
        return cls(
            id=str(data.get('id', '')),
            user_id=data.get('userId', ''),
            username=data.get('username') or '',
            avatar=data.get('avatar'),
            content=data.get('content') or '',
            created_at=data.get('createdAt') or '',
        )
