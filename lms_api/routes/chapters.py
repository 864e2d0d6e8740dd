from flask import Blueprint, request

from lms_api.decorators import token_required, role_required, enrollment_required
from lms_api import firestore_dao as dao
from lms_api.firestore_models import Chapter, CHAPTER_FIELDS
from lms_api.responses import success, bad_request, not_found, handle_failure

bp = Blueprint('chapters', __name__, url_prefix='/v1/courses/<course_id>/chapters')


@bp.route('', methods=['GET'])
@token_required
@enrollment_required
@handle_failure('FETCH_FAILED', 'Failed to fetch chapters')
def list_chapters(course_id):
    return success(dao.list_chapters(course_id))


@bp.route('/<chapter_id>', methods=['GET'])
@token_required
@enrollment_required
@handle_failure('FETCH_FAILED', 'Failed to fetch chapter')
def get_chapter(course_id, chapter_id):
    chapter = dao.get_chapter(course_id, chapter_id)
    if not chapter:
        return not_found('Chapter not found')
    return success(chapter)


@bp.route('', methods=['POST'])
@token_required
@role_required('admin')
@handle_failure('CREATE_FAILED', 'Failed to create chapter')
def create_chapter(course_id):
    data = request.get_json(silent=True) or {}
    if not data.get('title'):
        return bad_request('title is required')

    chapter_data = Chapter.from_payload(data).to_dict()
    chapter_id = dao.create_chapter(course_id, chapter_data)
    return success({'id': chapter_id, **dao.strip_sentinels(chapter_data)}, 201)


@bp.route('/<chapter_id>', methods=['PATCH'])
@token_required
@role_required('admin')
@handle_failure('UPDATE_FAILED', 'Failed to update chapter')
def update_chapter(course_id, chapter_id):
    data = request.get_json(silent=True) or {}
    if not dao.get_chapter(course_id, chapter_id):
        return not_found('Chapter not found')

    updates = {key: data[key] for key in CHAPTER_FIELDS if key in data}
    dao.update_chapter(course_id, chapter_id, updates)
    return success(dao.get_chapter(course_id, chapter_id))


@bp.route('/<chapter_id>', methods=['DELETE'])
@token_required
@role_required('admin')
@handle_failure('DELETE_FAILED', 'Failed to delete chapter')
def delete_chapter(course_id, chapter_id):
    dao.delete_chapter(course_id, chapter_id)
    return success({'id': chapter_id, 'deleted': True})
