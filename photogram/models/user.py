# photogram/models/user.py
from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class SocialLinks:
    """User 문서 내부에 저장될 소셜 계정 정보."""
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (('instagram', self.instagram), ('twitter', self.twitter), ('facebook', self.facebook)) if v is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SocialLinks':
        data = data or {}
        return cls(instagram=data.get('instagram'), twitter=data.get('twitter'), facebook=data.get('facebook'))


@dataclass(frozen=True)
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.

    followers/following 카운터와 followersList/followingList 는 서로 독립적인
    update 호출로 갱신되므로 항상 일치한다는 보장은 없습니다.
    """
    id: str
    username: str
    avatar: Optional[str] = None
    followers: int = 0
    following: int = 0
    followers_list: Optional[Tuple[str, ...]] = None
    following_list: Optional[Tuple[str, ...]] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    social: SocialLinks = field(default_factory=SocialLinks)

    def is_following(self, user_id: str) -> bool:
        return user_id in (self.following_list or ())

    def is_followed_by(self, user_id: str) -> bool:
        return user_id in (self.followers_list or ())

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 에 저장되는 문서 형태(camelCase)로 변환합니다."""
        data = {
            'id': self.id,
            'username': self.username,
            'avatar': self.avatar,
            'followers': self.followers,
            'following': self.following,
        }
        if self.followers_list is not None:
            data['followersList'] = list(self.followers_list)
        if self.following_list is not None:
            data['followingList'] = list(self.following_list)
        if self.bio is not None:
            data['bio'] = self.bio
        if self.website is not None:
            data['website'] = self.website
        social = self.social.to_dict()
        if social:
            data['social'] = social
        return data

    @classmethod
    def from_dict(cls, doc_id: str, data: Dict[str, Any]) -> 'User':
        followers_list = data.get('followersList')
        following_list = data.get('followingList')
        return cls(
            id=data.get('id') or doc_id,
            username=data.get('username') or '',
            avatar=data.get('avatar'),
            followers=int(data.get('followers') or 0),
            following=int(data.get('following') or 0),
            followers_list=tuple(followers_list) if followers_list is not None else None,
            following_list=tuple(following_list) if following_list is not None else None,
            bio=data.get('bio'),
            website=data.get('website'),
            social=SocialLinks.from_dict(data.get('social')),
        )
