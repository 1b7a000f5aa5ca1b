# photogram/services/test_app_store.py
"""
AppStore 동작 테스트

사용법: python -m pytest photogram/services/test_app_store.py -v
"""

import logging
import threading

import pytest

from conftest import alice_doc, bob_doc, photo_doc
from photogram.models.photo import Media, MediaKind, Photo
from photogram.models.user import User


def _load_feed(store, firestore_fake, *doc_ids):
    photos = [Photo.from_dict(doc_id, firestore_fake.doc('photos', doc_id)) for doc_id in doc_ids]
    store.set_feed(photos)
    return photos


@pytest.fixture
def feed_store(store, firestore_fake):
    firestore_fake.seed('photos', 'p1', photo_doc(caption='first'))
    firestore_fake.seed('photos', 'p2', photo_doc(caption='second'))
    firestore_fake.seed('photos', 'p3', photo_doc(caption='third'))
    _load_feed(store, firestore_fake, 'p1', 'p2', 'p3')
    return store


def _sign_in(store, doc=None):
    store.set_session(User.from_dict('alice', doc or alice_doc()))


# --- 피드 교체 ---
def test_set_feed_keeps_given_order(store):
    photos = [Photo.from_dict(pid, photo_doc()) for pid in ('c', 'a', 'b')]
    store.set_feed(photos)
    assert [p.id for p in store.photos] == ['c', 'a', 'b']


def test_set_feed_overwrites_added_photo(store):
    store.add_photo(Photo.from_dict('new', photo_doc()))
    store.set_feed([Photo.from_dict('a', photo_doc()), Photo.from_dict('b', photo_doc())])
    assert [p.id for p in store.photos] == ['a', 'b']


def test_add_photo_prepends(feed_store):
    feed_store.add_photo(Photo.from_dict('p0', photo_doc()))
    assert [p.id for p in feed_store.photos] == ['p0', 'p1', 'p2', 'p3']


# --- 좋아요 ---
def test_like_without_session_is_noop(feed_store, firestore_fake):
    before = feed_store.state
    firestore_fake.calls.clear()

    assert feed_store.like_photo('p1') is False
    assert feed_store.state == before
    assert firestore_fake.calls == []


def test_like_increments_local_and_remote(feed_store, firestore_fake):
    _sign_in(feed_store)

    assert feed_store.like_photo('p1') is True
    assert feed_store.get_photo('p1').likes == 1
    assert feed_store.get_photo('p2').likes == 0
    assert firestore_fake.doc('photos', 'p1')['likes'] == 1
    assert firestore_fake.doc('photos', 'p1')['likedBy'] == ['alice']


def test_like_remote_failure_leaves_state_and_logs(feed_store, firestore_fake, caplog):
    _sign_in(feed_store)
    firestore_fake.fail_on('update', 'photos', 'p1')
    before = feed_store.get_photo('p1')

    with caplog.at_level(logging.ERROR):
        result = feed_store.like_photo('p1')

    assert result is False
    assert feed_store.get_photo('p1') == before
    assert any('사진 좋아요' in record.message for record in caplog.records)


def test_concurrent_likes_count_each_resolved_call(feed_store):
    _sign_in(feed_store)
    threads = [threading.Thread(target=feed_store.like_photo, args=('p2',)) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert feed_store.get_photo('p2').likes == 20


def test_like_does_not_prevent_double_like(feed_store):
    _sign_in(feed_store)
    feed_store.like_photo('p1')
    feed_store.like_photo('p1')
    assert feed_store.get_photo('p1').likes == 2


# --- 댓글 ---
@pytest.mark.parametrize('content', ['', '   ', '\n\t'])
def test_blank_comment_is_noop(feed_store, firestore_fake, content):
    _sign_in(feed_store)
    before = feed_store.state
    firestore_fake.calls.clear()

    assert feed_store.add_comment('p1', content) is None
    assert feed_store.state == before
    assert firestore_fake.calls == []


def test_comment_without_session_is_noop(feed_store, firestore_fake):
    before = feed_store.state
    firestore_fake.calls.clear()

    assert feed_store.add_comment('p1', 'nice!') is None
    assert feed_store.state == before
    assert firestore_fake.calls == []


def test_comment_appends_denormalized_author(feed_store, firestore_fake):
    _sign_in(feed_store)

    comment = feed_store.add_comment('p1', '  nice shot  ')

    assert comment.content == 'nice shot'
    assert comment.user_id == 'alice'
    assert comment.username == 'alice'
    assert comment.avatar == 'https://example.com/alice.png'
    assert comment.created_at.endswith('Z')
    assert feed_store.get_photo('p1').comments == (comment,)
    assert firestore_fake.doc('photos', 'p1')['comments'] == [comment.to_dict()]


def test_comment_remote_failure_returns_none(feed_store, firestore_fake):
    _sign_in(feed_store)
    firestore_fake.fail_on('update', 'photos', 'p1')

    assert feed_store.add_comment('p1', 'hello') is None
    assert feed_store.get_photo('p1').comments == ()


# --- 게시 ---
def test_publish_photo_creates_then_prepends(feed_store, firestore_fake):
    _sign_in(feed_store)
    media = Media(type=MediaKind.IMAGE, url='https://storage.example.com/photos/alice/x.jpg', size=2048)

    photo = feed_store.publish_photo(media, 'hello', 'filter-warm')

    assert photo.id
    assert feed_store.photos[0] == photo
    stored = firestore_fake.doc('photos', photo.id)
    assert stored['userId'] == 'alice'
    assert stored['filter'] == 'filter-warm'
    assert stored['media'] == {'type': 'image', 'url': media.url, 'size': 2048}


def test_publish_photo_failure_keeps_feed(feed_store, firestore_fake):
    _sign_in(feed_store)
    firestore_fake.fail_on('create', 'photos')
    before = feed_store.photos

    photo = feed_store.publish_photo(Media(type=MediaKind.IMAGE, url='u'))

    assert photo is None
    assert feed_store.photos == before


# --- 프로필 ---
def test_update_profile_trims_and_writes(store, firestore_fake):
    _sign_in(store)

    ok = store.update_profile(' Alice K ', bio=' hi ', website='https://alice.dev',
                              social={'instagram': ' alice_ig '})

    assert ok is True
    assert store.user.username == 'Alice K'
    assert store.user.bio == 'hi'
    assert store.user.social.instagram == 'alice_ig'
    assert firestore_fake.doc('users', 'alice')['username'] == 'Alice K'
    assert firestore_fake.doc('users', 'alice')['social']['instagram'] == 'alice_ig'


def test_update_profile_blank_username_is_noop(store, firestore_fake):
    _sign_in(store)
    firestore_fake.calls.clear()

    assert store.update_profile('   ') is False
    assert firestore_fake.calls == []


def test_update_avatar(store, firestore_fake):
    _sign_in(store)
    assert store.update_avatar('https://storage.example.com/avatars/alice/a.png') is True
    assert store.user.avatar == 'https://storage.example.com/avatars/alice/a.png'
    assert firestore_fake.doc('users', 'alice')['avatar'] == store.user.avatar


# --- 팔로우 ---
def test_follow_updates_both_documents(store, firestore_fake):
    _sign_in(store)

    assert store.follow_user('bob') is True
    assert store.user.following == 1
    assert store.user.is_following('bob')
    assert firestore_fake.doc('users', 'alice')['followingList'] == ['bob']
    assert firestore_fake.doc('users', 'bob')['followers'] == 1
    assert firestore_fake.doc('users', 'bob')['followersList'] == ['alice']


def test_follow_self_or_twice_is_noop(store, firestore_fake):
    firestore_fake.seed('users', 'alice', alice_doc(following=1, followingList=['bob']))
    firestore_fake.seed('users', 'bob', bob_doc(followers=1, followersList=['alice']))
    _sign_in(store, firestore_fake.doc('users', 'alice'))
    firestore_fake.calls.clear()

    assert store.follow_user('alice') is False
    assert store.follow_user('bob') is False
    assert [c for c in firestore_fake.calls if c[0] == 'update'] == []


def test_unfollow_not_followed_user_is_noop(store, firestore_fake):
    _sign_in(store)

    assert store.unfollow_user('bob') is False
    assert firestore_fake.doc('users', 'bob')['followers'] == 0
    assert [c for c in firestore_fake.calls if c[0] == 'update'] == []


def test_follow_missing_target_is_noop(store, firestore_fake):
    _sign_in(store)

    assert store.follow_user('ghost') is False
    assert store.user.following == 0


def test_unfollow(store, firestore_fake):
    firestore_fake.seed('users', 'alice', alice_doc(following=1, followingList=['bob']))
    firestore_fake.seed('users', 'bob', bob_doc(followers=1, followersList=['alice']))
    _sign_in(store, firestore_fake.doc('users', 'alice'))

    assert store.unfollow_user('bob') is True
    assert store.user.following == 0
    assert not store.user.is_following('bob')
    assert firestore_fake.doc('users', 'bob')['followers'] == 0
    assert firestore_fake.doc('users', 'bob')['followersList'] == []


def test_follow_second_phase_failure_leaves_partial_state(store, firestore_fake, caplog):
    _sign_in(store)
    firestore_fake.fail_on('update', 'users', 'bob')

    with caplog.at_level(logging.ERROR):
        result = store.follow_user('bob')

    assert result is False
    # 1단계(내 문서)는 반영된 상태로 남습니다.
    assert store.user.following == 1
    assert firestore_fake.doc('users', 'alice')['following'] == 1
    assert firestore_fake.doc('users', 'bob')['followers'] == 0
    assert any('2단계' in record.message for record in caplog.records)


def test_follow_first_phase_failure_changes_nothing(store, firestore_fake):
    _sign_in(store)
    firestore_fake.fail_on('update', 'users', 'alice')

    assert store.follow_user('bob') is False
    assert store.user.following == 0
    assert ('update', 'users', 'bob') not in firestore_fake.calls


# --- 카운터 보정 ---
def test_reconcile_fixes_counters_to_list_length(store, firestore_fake):
    firestore_fake.seed('users', 'alice', alice_doc(following=3, followingList=['bob'], followers=-1))
    _sign_in(store, firestore_fake.doc('users', 'alice'))

    assert store.reconcile_follow_counts('alice') is True
    assert firestore_fake.doc('users', 'alice')['following'] == 1
    assert firestore_fake.doc('users', 'alice')['followers'] == 0
    assert store.user.following == 1
    assert store.user.followers == 0


def test_reconcile_consistent_user_writes_nothing(store, firestore_fake):
    firestore_fake.calls.clear()
    assert store.reconcile_follow_counts('bob') is True
    assert [c for c in firestore_fake.calls if c[0] == 'update'] == []


def test_reconcile_missing_user(store):
    assert store.reconcile_follow_counts('ghost') is False


# --- 기타 로컬 상태 ---
def test_toggle_dark_mode(store):
    assert store.dark_mode is False
    assert store.toggle_dark_mode() is True
    assert store.toggle_dark_mode() is False


# --- 팔로우 불일치 상태 ---
def _partial_follow(store, firestore_fake):
    """1단계만 반영된 팔로우 상태를 만듭니다. (alice 는 bob 을 팔로잉, bob 의 팔로워 목록에는 없음)"""
    _sign_in(store)
    firestore_fake.fail_on('update', 'users', 'bob')
    assert store.follow_user('bob') is False
    firestore_fake.clear_failures()


def test_unfollow_after_partial_follow_keeps_counters_non_negative(store, firestore_fake):
    _partial_follow(store, firestore_fake)

    assert store.unfollow_user('bob') is True

    bob = firestore_fake.doc('users', 'bob')
    assert bob['followers'] == 0
    assert bob['followersList'] == []
    assert firestore_fake.doc('users', 'alice')['following'] == 0
    assert store.user.following == 0
    assert not store.user.is_following('bob')


def test_follow_again_completes_partial_follow(store, firestore_fake):
    _partial_follow(store, firestore_fake)

    assert store.follow_user('bob') is True

    # 1단계는 이미 반영되어 있으므로 내 카운터는 다시 올라가지 않습니다.
    assert firestore_fake.doc('users', 'alice')['following'] == 1
    assert store.user.following == 1
    assert firestore_fake.doc('users', 'bob')['followers'] == 1
    assert firestore_fake.doc('users', 'bob')['followersList'] == ['alice']
