# photogram/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app

from photogram.api.feed.schemas import PhotoResponseSchema
from photogram.api.uploads.schemas import UploadFormSchema, UploadProgressSchema
from photogram.utils.media_utils import format_file_size

# 이 블루프린트에 속한 모든 API는 '/api/uploads' 라는 접두사 URL을 갖게 됩니다.
uploads_bp = Blueprint('uploads', __name__)


@uploads_bp.route('', methods=['POST'])
def upload_media():
    """
    사진/동영상을 업로드하고 게시물을 만듭니다.
    - multipart/form-data: file (필수), caption, filter
    """
    upload_service = current_app.services['uploads']

    file = request.files.get('file')
    if file is None or not file.filename:
        return jsonify({"error_code": "FILE_REQUIRED", "message": "업로드할 파일이 필요합니다."}), 400

    form = UploadFormSchema().load(request.form.to_dict())
    data = file.read()

    try:
        photo = upload_service.upload(file.filename, file.mimetype, data, form['caption'], form['filter'])
    except PermissionError as e:
        return jsonify({"error_code": "SESSION_REQUIRED", "message": str(e)}), 401
    except ValueError as e:
        # 검증 오류는 사용자에게 바로 보여주는 메시지이므로 경고로만 남깁니다.
        logging.warning(f"업로드 요청 거부 ({file.filename}): {e}")
        return jsonify({"error_code": "INVALID_MEDIA", "message": str(e)}), 400

    if photo is None:
        progress = upload_service.progress
        return jsonify({"error_code": "UPLOAD_FAILED", "message": progress.error}), 502

    return jsonify({
        "photo": PhotoResponseSchema().dump(photo),
        "size_label": format_file_size(len(data)),
    }), 201


@uploads_bp.route('/progress', methods=['GET'])
def get_upload_progress():
    """마지막 업로드의 진행률과 상태를 반환합니다."""
    upload_service = current_app.services['uploads']
    return jsonify(UploadProgressSchema().dump(upload_service.progress)), 200
