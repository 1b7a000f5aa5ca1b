# photogram/utils/__init__.py
"""
유틸리티 모듈 패키지

이 패키지는 프로젝트 전체에서 공통으로 사용되는 유틸리티 함수들을 포함합니다.
"""

from .datetime_utils import (
    DateTimeUtils,
    now_iso, parse_iso
)
from .media_utils import (
    validate_video, generate_video_thumbnail, get_video_duration,
    format_file_size, is_video_type
)

__all__ = [
    'DateTimeUtils',
    'now_iso', 'parse_iso',
    'validate_video', 'generate_video_thumbnail', 'get_video_duration',
    'format_file_size', 'is_video_type'
]
