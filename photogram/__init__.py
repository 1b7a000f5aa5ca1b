# photogram/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - 설정
from photogram.core.config import config_by_name

# - API 블루프린트
from photogram.api.feed.routes import feed_bp
from photogram.api.search.routes import search_bp
from photogram.api.users.routes import users_bp
from photogram.api.uploads.routes import uploads_bp
from photogram.api.session.routes import session_bp

# - 서비스 모듈
from photogram.services.firestore_service import FirestoreService
from photogram.services.storage_service import StorageService
from photogram.services.session_service import SessionService
from photogram.services.app_store import AppStore
from photogram.api.feed.services import FeedService
from photogram.api.search.services import SearchService
from photogram.api.users.services import UserService
from photogram.api.uploads.services import UploadService


def _init_firebase(app: Flask) -> None:
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def create_app(config_name=None, firestore_service=None, storage_service=None, verify_token=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' 또는 'testing'. 없으면 FLASK_ENV 를 따릅니다.
    :param firestore_service: 주입할 문서 저장소 어댑터. 없으면 Firestore 에 연결합니다.
    :param storage_service: 주입할 파일 저장소 어댑터. 없으면 Firebase Storage 에 연결합니다.
    :param verify_token: 주입할 ID 토큰 검증 함수. 없으면 firebase_admin.auth 를 사용합니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 외부 서비스 초기화 (주입되지 않은 어댑터가 있을 때만 Firebase 에 연결)
    # =====================================================================================
    if firestore_service is None or storage_service is None or verify_token is None:
        _init_firebase(app)

    if firestore_service is None:
        firestore_service = FirestoreService()
        firestore_service.init_app()

    if storage_service is None:
        try:
            storage_service = StorageService()
            storage_service.init_app(app)
            logging.info("Storage service initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 어댑터와 스토어
    app.services['firestore'] = firestore_service
    app.services['storage'] = storage_service
    store = AppStore(firestore_service)
    app.services['store'] = store
    session_service = SessionService(firestore_service, verify_token=verify_token)
    app.services['session'] = session_service

    # 5-2. 도메인 서비스
    app.services['feed'] = FeedService(firestore_service)
    app.services['search'] = SearchService(firestore_service, min_length=app.config['SEARCH_MIN_LENGTH'])
    app.services['users'] = UserService(firestore_service)
    app.services['uploads'] = UploadService(
        store=store,
        storage_service=storage_service,
        max_video_size=app.config['MAX_VIDEO_SIZE_MB'] * 1024 * 1024
    )

    # 5-3. 세션이 바뀔 때마다 사용자 문서를 읽어 스토어의 user 를 교체합니다.
    session_service.on_session_change(lambda session: store.set_session(session_service.resolve_user(session)))

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(feed_bp, url_prefix='/api')
    app.register_blueprint(search_bp, url_prefix='/api/search')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    app.register_blueprint(session_bp, url_prefix='/api/session')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 404/405 같은 HTTP 예외는 Flask 기본 응답을 그대로 사용
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
