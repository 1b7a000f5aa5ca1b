# photogram/utils/datetime_utils.py
"""
문서 타임스탬프 처리를 위한 유틸리티 모듈

photos/comments 문서의 createdAt 은 밀리초 정밀도의 UTC ISO 문자열
(예: 2024-01-15T10:30:00.123Z)로 저장합니다. 같은 형식끼리는 문자열 비교가
시간 순서와 일치하므로 Firestore 의 order_by('createdAt') 정렬이 그대로 피드 순서가 됩니다.
"""

import logging
from datetime import datetime, timezone
from typing import Union
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간 처리를 위한 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 을 밀리초 정밀도의 ISO 문자열(Z 접미사)로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 으로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00.123Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00
        """
        if not iso_string:
            raise ValueError("빈 문자열은 파싱할 수 없습니다")
        try:
            dt = dateutil_parser.isoparse(iso_string)
        except (ValueError, OverflowError) as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_timestamp_ms(dt: Union[datetime, None] = None) -> int:
        """datetime(기본값: 현재 시각)을 Unix timestamp (밀리초)로 변환"""
        dt = dt or DateTimeUtils.now()
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)


def now_iso() -> str:
    """현재 시각의 createdAt 문자열"""
    return DateTimeUtils.to_iso_string(DateTimeUtils.now())

def parse_iso(iso_string: str) -> datetime:
    return DateTimeUtils.parse_iso_datetime(iso_string)
