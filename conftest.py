# conftest.py
"""
테스트 공용 픽스처

Firestore/Storage/Firebase Auth 대신 메모리 기반 가짜 객체를 주입합니다.
가짜 Firestore 는 update_document 에 넘어온 Increment/ArrayUnion/ArrayRemove 를
실제 SDK 와 같은 의미로 해석합니다.
"""

import copy
import itertools
from collections import defaultdict

import pytest
from google.cloud.firestore_v1.transforms import Increment, ArrayUnion, ArrayRemove

from photogram import create_app
from photogram.services.app_store import AppStore
from photogram.services.storage_service import StorageService


class InMemoryFirestore:
    """FirestoreService 와 같은 메서드를 가진 메모리 저장소. fail_on 으로 특정 호출을 실패시킬 수 있습니다."""

    _OPS = {
        '==': lambda a, b: a == b,
        '>=': lambda a, b: a >= b,
        '<=': lambda a, b: a <= b,
        '<': lambda a, b: a < b,
        '>': lambda a, b: a > b,
        'array_contains': lambda a, b: isinstance(a, list) and b in a,
    }

    def __init__(self):
        self.collections = defaultdict(dict)
        self.calls = []
        self._failures = []
        self._ids = itertools.count(1)

    # --- 테스트 보조 ---
    def seed(self, collection, doc_id, data):
        self.collections[collection][doc_id] = copy.deepcopy(data)

    def doc(self, collection, doc_id):
        return self.collections[collection].get(doc_id)

    def fail_on(self, method, collection=None, doc_id=None, error=None):
        self._failures.append((method, collection, doc_id, error or RuntimeError("원격 저장소 오류")))

    def clear_failures(self):
        self._failures.clear()

    def _record(self, method, collection, doc_id=None):
        self.calls.append((method, collection, doc_id))
        for f_method, f_collection, f_doc_id, error in self._failures:
            if f_method == method and f_collection in (None, collection) and f_doc_id in (None, doc_id):
                raise error

    # --- FirestoreService 계약 ---
    def get_document(self, collection, doc_id):
        self._record('get', collection, doc_id)
        data = self.collections[collection].get(doc_id)
        return {'id': doc_id, **copy.deepcopy(data)} if data is not None else None

    def query_documents(self, collection, filters=None, order_by=None, descending=False):
        self._record('query', collection)
        results = []
        for doc_id, data in self.collections[collection].items():
            matched = True
            for field_path, op, value in filters or []:
                if field_path not in data or not self._OPS[op](data[field_path], value):
                    matched = False
                    break
            if matched:
                results.append({'id': doc_id, **copy.deepcopy(data)})
        if order_by:
            results = [r for r in results if order_by in r]
            results.sort(key=lambda r: r[order_by], reverse=descending)
        return results

    def create_document(self, collection, data):
        self._record('create', collection)
        doc_id = f"{collection}-{next(self._ids)}"
        self.collections[collection][doc_id] = copy.deepcopy(data)
        return doc_id

    def set_document(self, collection, doc_id, data):
        self._record('set', collection, doc_id)
        self.collections[collection][doc_id] = copy.deepcopy(data)

    def update_document(self, collection, doc_id, updates):
        self._record('update', collection, doc_id)
        data = self.collections[collection].get(doc_id)
        if data is None:
            raise LookupError(f"No document to update: {collection}/{doc_id}")
        for key, value in updates.items():
            if isinstance(value, Increment):
                data[key] = (data.get(key) or 0) + value.value
            elif isinstance(value, ArrayUnion):
                current = list(data.get(key) or [])
                current.extend(v for v in value.values if v not in current)
                data[key] = current
            elif isinstance(value, ArrayRemove):
                data[key] = [v for v in (data.get(key) or []) if v not in value.values]
            else:
                data[key] = copy.deepcopy(value)


class FakeStorage(StorageService):
    """경로 규칙은 StorageService 그대로 쓰고, 업로드만 메모리에 기록합니다."""

    def __init__(self):
        super().__init__(bucket=None)
        self.uploads = {}
        self.fail = False

    def upload_bytes(self, path, data, content_type, progress_callback=None):
        if self.fail:
            raise ConnectionError("업로드 연결이 끊어졌습니다.")
        half = len(data) // 2
        if progress_callback:
            progress_callback(half, len(data))
            progress_callback(len(data), len(data))
        self.uploads[path] = (data, content_type)
        return f"https://storage.example.com/{path}"


ID_TOKENS = {
    'token-alice': {'uid': 'alice', 'name': 'Alice', 'picture': 'https://example.com/alice.png'},
    'token-newbie': {'uid': 'newbie', 'name': 'Newbie', 'picture': None},
}


def fake_verify_token(id_token):
    if id_token not in ID_TOKENS:
        raise ValueError("Invalid ID token")
    return dict(ID_TOKENS[id_token])


def alice_doc(**overrides):
    data = {
        'id': 'alice', 'username': 'alice', 'avatar': 'https://example.com/alice.png',
        'followers': 0, 'following': 0, 'followersList': [], 'followingList': [],
    }
    data.update(overrides)
    return data


def bob_doc(**overrides):
    data = {
        'id': 'bob', 'username': 'bob', 'avatar': None,
        'followers': 0, 'following': 0, 'followersList': [], 'followingList': [],
    }
    data.update(overrides)
    return data


def photo_doc(user_id='bob', caption='sunset at the beach', created_at='2024-01-15T10:30:00.000Z', **overrides):
    data = {
        'media': {'type': 'image', 'url': 'https://storage.example.com/photos/bob/1.jpg'},
        'caption': caption,
        'likes': 0,
        'comments': [],
        'userId': user_id,
        'filter': '',
        'createdAt': created_at,
    }
    data.update(overrides)
    return data


@pytest.fixture
def firestore_fake():
    db = InMemoryFirestore()
    db.seed('users', 'alice', alice_doc())
    db.seed('users', 'bob', bob_doc())
    return db


@pytest.fixture
def storage_fake():
    return FakeStorage()


@pytest.fixture
def store(firestore_fake):
    return AppStore(firestore_fake)


@pytest.fixture
def app(firestore_fake, storage_fake):
    app = create_app('testing', firestore_service=firestore_fake,
                     storage_service=storage_fake, verify_token=fake_verify_token)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in_client(client):
    response = client.post('/api/session', json={'id_token': 'token-alice'})
    assert response.status_code == 200
    return client
