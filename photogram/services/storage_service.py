# photogram/services/storage_service.py
import io
import logging
from typing import Callable, Optional

from flask import Flask
from firebase_admin import storage

from photogram.utils.media_utils import build_storage_filename

# (전송된 바이트, 전체 바이트)
ProgressCallback = Callable[[int, int], None]

# 256KB 의 배수여야 하며, 이 크기 단위로 resumable 업로드가 진행됩니다.
UPLOAD_CHUNK_SIZE = 4 * 1024 * 1024


class _ProgressStream(io.BytesIO):
    """SDK 가 스트림을 읽어갈 때마다 진행률 콜백을 호출하는 BytesIO."""

    def __init__(self, data: bytes, callback: Optional[ProgressCallback]):
        super().__init__(data)
        self._total = len(data)
        self._callback = callback

    def read(self, size=-1):
        chunk = super().read(size)
        if chunk and self._callback:
            self._callback(self.tell(), self._total)
        return chunk


class StorageService:
    """
    Firebase Storage 업로드를 담당하는 서비스 클래스입니다.
    업로드 경로는 용도와 사용자 ID 로 구분되고, 파일명은 타임스탬프 + 랜덤 문자열로 만듭니다.
    """

    # 업로드 용도별 최상위 폴더
    path_map = {
        "photo": "photos",
        "video": "videos",
        "avatar": "avatars",
    }

    def __init__(self, bucket=None):
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def build_path(self, purpose: str, user_id: str, filename: str) -> str:
        """
        :param purpose: 업로드 목적 ("photo", "video", "avatar")
        :param user_id: 업로드하는 사용자 ID
        :param filename: 원본 파일명 (확장자 파악에 사용)
        """
        folder = self.path_map.get(purpose)
        if not folder:
            raise ValueError(f"'{purpose}'은(는) 유효한 업로드 타입이 아닙니다.")
        return f"{folder}/{user_id}/{build_storage_filename(filename)}"

    def upload_bytes(self, path: str, data: bytes, content_type: str,
                     progress_callback: Optional[ProgressCallback] = None) -> str:
        """
        파일을 업로드한 뒤 공개로 전환하고 공개 URL 을 반환합니다.

        :param path: build_path 로 만든 저장 경로
        :param data: 파일 내용
        :param content_type: MIME 타입
        :param progress_callback: 업로드 진행 중 (전송 바이트, 전체 바이트)로 호출됩니다.
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        blob = self.bucket.blob(path, chunk_size=UPLOAD_CHUNK_SIZE)
        stream = _ProgressStream(data, progress_callback)
        blob.upload_from_file(stream, size=len(data), content_type=content_type)

        blob.make_public()
        logging.info(f"Storage 업로드 완료: {path} ({len(data)} bytes)")
        return blob.public_url
