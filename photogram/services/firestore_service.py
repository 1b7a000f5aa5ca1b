# photogram/services/firestore_service.py
import logging
from typing import Optional, Dict, Any, List, Tuple, Iterable

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

# (field, op, value) 형태의 조건. 예: ('username', '>=', 'ab')
QueryFilter = Tuple[str, str, Any]


class FirestoreService:
    """
    원격 문서 저장소(Firestore)에 대한 얇은 어댑터입니다.
    앱의 나머지 부분은 이 클래스가 제공하는 좁은 계약(get/query/create/set/update)만 사용합니다.

    update_document 의 값으로 firestore.Increment / ArrayUnion / ArrayRemove 를 넘기면
    각 필드 단위로 원자적으로 적용됩니다. 여러 문서에 걸친 트랜잭션은 제공하지 않습니다.
    """

    def __init__(self, client=None):
        self.db = client

    def init_app(self):
        """firebase_admin 초기화 이후 create_app 에서 한 번 호출됩니다."""
        self.db = firestore.client()
        logging.info("FirestoreService: Firestore 클라이언트가 초기화되었습니다.")

    def _collection(self, collection: str):
        if self.db is None:
            raise RuntimeError("FirestoreService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.db.collection(collection)

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """문서 하나를 읽습니다. 없으면 None. 반환값에는 문서 ID 가 'id' 로 포함됩니다."""
        doc = self._collection(collection).document(doc_id).get()
        if not doc.exists:
            return None
        return {'id': doc.id, **doc.to_dict()}

    def query_documents(self, collection: str, filters: Optional[Iterable[QueryFilter]] = None,
                        order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        """범위/동등 조건과 정렬로 문서 목록을 조회합니다."""
        query = self._collection(collection)
        for field_path, op, value in filters or []:
            query = query.where(filter=FieldFilter(field_path, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        return [{'id': doc.id, **doc.to_dict()} for doc in query.stream()]

    def create_document(self, collection: str, data: Dict[str, Any]) -> str:
        """자동 생성 ID 로 새 문서를 만들고 그 ID 를 반환합니다."""
        doc_ref = self._collection(collection).document()
        doc_ref.set(data)
        logging.info(f"Firestore 저장 성공 (Collection: {collection}, Doc ID: {doc_ref.id})")
        return doc_ref.id

    def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collection(collection).document(doc_id).set(data)

    def update_document(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> None:
        """필드별 갱신. 문서가 없으면 SDK 가 NotFound 예외를 발생시킵니다."""
        self._collection(collection).document(doc_id).update(updates)
