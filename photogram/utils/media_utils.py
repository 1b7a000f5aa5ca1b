# photogram/utils/media_utils.py
"""
업로드 전에 클라이언트 쪽에서 수행하는 미디어 검사/가공 함수 모음.
모두 상태가 없는 순수 함수이므로 다른 작업과 동시에 실행되어도 무방합니다.
"""

import base64
import io
import os
import tempfile
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Iterator

import cv2
from PIL import Image

from photogram.utils.datetime_utils import DateTimeUtils

MAX_VIDEO_SIZE = 100 * 1024 * 1024  # 100MB
SUPPORTED_VIDEO_FORMATS = (
    'video/mp4',
    'video/webm',
    'video/quicktime',
    'video/x-m4v',
)

THUMBNAIL_OFFSET_MS = 1000
THUMBNAIL_JPEG_QUALITY = 70

_SIZE_UNITS = ('Bytes', 'KB', 'MB', 'GB')


@dataclass(frozen=True)
class VideoValidation:
    valid: bool
    error: Optional[str] = None


def is_video_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.startswith('video/')


def validate_video(content_type: str, size: int, max_size: int = MAX_VIDEO_SIZE) -> VideoValidation:
    """
    동영상 파일의 MIME 타입과 크기를 검사합니다.
    실패는 사용자에게 바로 보여줄 검증 오류이며 예외가 아닙니다.

    :param content_type: 파일의 MIME 타입 (예: "video/mp4")
    :param size: 파일 크기 (바이트)
    :param max_size: 허용 최대 크기 (이 값과 같으면 허용)
    """
    if content_type not in SUPPORTED_VIDEO_FORMATS:
        return VideoValidation(
            valid=False,
            error="지원하지 않는 동영상 형식입니다. MP4, WebM, MOV 파일을 사용해주세요."
        )

    if size > max_size:
        return VideoValidation(
            valid=False,
            error=f"동영상 크기가 {max_size // (1024 * 1024)}MB 제한을 초과했습니다."
        )

    return VideoValidation(valid=True)


@contextmanager
def _open_video(video_bytes: bytes) -> Iterator[cv2.VideoCapture]:
    """OpenCV 는 파일 경로로만 디코딩할 수 있으므로 임시 파일을 거쳐 엽니다."""
    fd, path = tempfile.mkstemp(suffix='.video')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(video_bytes)

        capture = cv2.VideoCapture(path)
        try:
            if not capture.isOpened():
                raise ValueError("동영상을 불러오지 못했습니다.")
            yield capture
        finally:
            capture.release()
    finally:
        os.remove(path)


def generate_video_thumbnail(video_bytes: bytes) -> str:
    """
    동영상 1초 지점의 프레임을 JPEG(품질 70) data URL 로 만듭니다.

    :param video_bytes: 동영상 파일 내용
    :return: "data:image/jpeg;base64,..." 형식의 문자열
    :raises ValueError: 메타데이터를 읽지 못했거나 1초 지점으로 이동/디코딩에 실패한 경우
    """
    with _open_video(video_bytes) as capture:
        capture.set(cv2.CAP_PROP_POS_MSEC, THUMBNAIL_OFFSET_MS)
        ok, frame = capture.read()
        if not ok or frame is None:
            raise ValueError("썸네일 프레임을 읽지 못했습니다.")

    # OpenCV 는 BGR 순서이므로 PIL 로 넘기기 전에 RGB 로 변환합니다.
    image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
    buffer = io.BytesIO()
    image.save(buffer, format='JPEG', quality=THUMBNAIL_JPEG_QUALITY)
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/jpeg;base64,{encoded}"


def get_video_duration(video_bytes: bytes) -> float:
    """디코딩된 메타데이터로부터 동영상 길이(초)를 계산합니다."""
    with _open_video(video_bytes) as capture:
        fps = capture.get(cv2.CAP_PROP_FPS)
        frame_count = capture.get(cv2.CAP_PROP_FRAME_COUNT)

    if not fps or fps <= 0 or frame_count <= 0:
        raise ValueError("동영상 메타데이터를 읽지 못했습니다.")
    return frame_count / fps


def format_file_size(num_bytes: float) -> str:
    """
    바이트 수를 사람이 읽기 쉬운 단위 문자열로 변환합니다. (1024 단위, 소수점 2자리)

    >>> format_file_size(1536)
    '1.50 KB'
    """
    if num_bytes < 0:
        raise ValueError(f"파일 크기는 음수일 수 없습니다: {num_bytes}")
    if num_bytes == 0:
        return '0 Bytes'

    index = 0
    while index < len(_SIZE_UNITS) - 1 and num_bytes >= 1024 ** (index + 1):
        index += 1
    return f"{num_bytes / 1024 ** index:.2f} {_SIZE_UNITS[index]}"


def build_storage_filename(original_name: str) -> str:
    """업로드 파일명 충돌을 피하기 위해 '{밀리초}_{랜덤}.{확장자}' 형태의 이름을 만듭니다."""
    extension = original_name.split('.')[-1] if '.' in original_name else ''
    stem = f"{DateTimeUtils.to_timestamp_ms()}_{uuid.uuid4().hex[:8]}"
    return f"{stem}.{extension}" if extension else stem


