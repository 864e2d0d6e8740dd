from flask import Blueprint, request

from lms_api.decorators import token_required, get_current_identity
from lms_api import firestore_dao as dao
from lms_api.responses import success, bad_request, not_found, handle_failure

bp = Blueprint('progress', __name__, url_prefix='/v1/progress')


@bp.route('', methods=['POST'])
@token_required
@handle_failure('PROGRESS_FAILED', 'Failed to update progress')
def complete_chapter():
    data = request.get_json(silent=True) or {}
    course_id = data.get('courseId')
    chapter_id = data.get('chapterId')

    if not all(isinstance(v, str) and v for v in (course_id, chapter_id)):
        return bad_request('courseId and chapterId are required')
    if not dao.get_chapter(course_id, chapter_id):
        return not_found('Chapter not found')

    progress, created = dao.record_chapter_completion(get_current_identity().uid, course_id, chapter_id)
    return success(progress, 201 if created else 200)


@bp.route('', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch progress')
def my_progress():
    return success(dao.get_progress_by_user(get_current_identity().uid))


@bp.route('/<course_id>', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch progress')
def course_progress(course_id):
    uid = get_current_identity().uid
    progress = dao.get_progress(uid, course_id)
    if not progress:
        return success({
            'userId': uid,
            'courseId': course_id,
            'completedChapters': [],
            'percentage': 0,
        })
    return success(progress)
