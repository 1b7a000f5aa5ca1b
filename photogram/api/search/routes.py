# photogram/api/search/routes.py
from flask import Blueprint, request, jsonify, current_app

from photogram.api.search.schemas import SearchResultsSchema

search_bp = Blueprint('search_bp', __name__)


@search_bp.route('', methods=['GET'])
def search():
    """
    입력할 때마다 호출되는 검색 API.
    - q 가 최소 길이(기본 2자)보다 짧으면 원격 조회 없이 빈 결과를 반환합니다.
    """
    search_service = current_app.services['search']
    query = request.args.get('q', '', type=str)

    results = search_service.search(query)
    return jsonify(SearchResultsSchema().dump(results)), 200
