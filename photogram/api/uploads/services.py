# photogram/api/uploads/services.py
import logging
from typing import Optional

from photogram.models.photo import Media, MediaKind, Photo
from photogram.models.state import UploadProgress, UploadStatus
from photogram.services.app_store import AppStore
from photogram.services.storage_service import StorageService
from photogram.utils.media_utils import (
    MAX_VIDEO_SIZE, is_video_type, validate_video, generate_video_thumbnail, get_video_duration
)


class UploadService:
    """
    사진/동영상 업로드 흐름을 담당하는 서비스 클래스.

    1. 동영상이면 형식/크기를 검사하고 썸네일과 길이를 추출합니다. (추출 실패는 업로드를 막지 않음)
    2. Storage 에 파일을 올리며 진행률(UploadProgress)을 갱신합니다.
    3. 업로드가 끝나면 AppStore.publish_photo 로 게시물을 만들고 피드에 추가합니다.
    """

    def __init__(self, store: AppStore, storage_service: StorageService, max_video_size: int = MAX_VIDEO_SIZE):
        self.store = store
        self.storage = storage_service
        self.max_video_size = max_video_size
        self._progress = UploadProgress()

    @property
    def progress(self) -> UploadProgress:
        return self._progress

    def _set_progress(self, progress: float, status: UploadStatus, error: Optional[str] = None) -> None:
        self._progress = UploadProgress(progress=progress, status=status, error=error)

    def _on_transfer(self, transferred: int, total: int) -> None:
        percent = (transferred / total) * 100 if total else 100.0
        self._set_progress(percent, UploadStatus.UPLOADING)

    def upload(self, filename: str, content_type: str, data: bytes,
               caption: str = '', filter_name: str = '') -> Optional[Photo]:
        """
        :raises PermissionError: 로그인한 사용자가 없는 경우
        :raises ValueError: 지원하지 않는 미디어이거나 동영상 검증에 실패한 경우
        :return: 게시된 Photo. 업로드나 게시에 실패하면 None (진행률은 error 상태)
        """
        user = self.store.user
        if not user:
            raise PermissionError("로그인이 필요합니다.")

        is_video = is_video_type(content_type)
        if is_video:
            validation = validate_video(content_type, len(data), self.max_video_size)
            if not validation.valid:
                raise ValueError(validation.error)
        elif not (content_type or '').startswith('image/'):
            raise ValueError("이미지 또는 동영상 파일만 업로드할 수 있습니다.")

        thumbnail_url, duration = None, None
        if is_video:
            self._set_progress(0.0, UploadStatus.PROCESSING)
            try:
                thumbnail_url = generate_video_thumbnail(data)
                duration = get_video_duration(data)
            except Exception as e:
                logging.warning(f"동영상 썸네일/길이 추출 실패, 없이 계속 진행합니다 ({filename}): {e}")

        self._set_progress(0.0, UploadStatus.UPLOADING)
        try:
            path = self.storage.build_path('video' if is_video else 'photo', user.id, filename)
            url = self.storage.upload_bytes(path, data, content_type, progress_callback=self._on_transfer)
        except Exception as e:
            logging.error(f"미디어 업로드 실패 ({filename}): {e}", exc_info=True)
            self._set_progress(self._progress.progress, UploadStatus.ERROR, "업로드에 실패했습니다. 다시 시도해주세요.")
            return None

        media = Media(
            type=MediaKind.VIDEO if is_video else MediaKind.IMAGE,
            url=url,
            thumbnail_url=thumbnail_url,
            duration=duration,
            size=len(data),
        )
        # 필터는 이미지에만 적용됩니다.
        photo = self.store.publish_photo(media, caption, '' if is_video else filter_name)
        if photo is None:
            self._set_progress(100.0, UploadStatus.ERROR, "게시물을 저장하지 못했습니다.")
            return None

        self._set_progress(100.0, UploadStatus.COMPLETE)
        return photo
