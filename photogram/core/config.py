# photogram/core/config.py

import os


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 미디어가 업로드될 Firebase Storage 버킷 이름
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 동영상 업로드 허용 최대 크기 (MB)
    MAX_VIDEO_SIZE_MB = int(os.getenv('MAX_VIDEO_SIZE_MB', 100))

    # 검색어가 이 길이보다 짧으면 원격 조회를 하지 않습니다.
    SEARCH_MIN_LENGTH = int(os.getenv('SEARCH_MIN_LENGTH', 2))


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('TEST_FIREBASE_STORAGE_BUCKET', 'photogram-test.appspot.com')


# FLASK_ENV 값에 따라 create_app 에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig
)
