from flask import Blueprint, request
from google.api_core.exceptions import AlreadyExists

from lms_api.decorators import token_required, get_current_identity
from lms_api import firestore_dao as dao
from lms_api.responses import success, error, bad_request, not_found, handle_failure

bp = Blueprint('enrollments', __name__, url_prefix='/v1/enrollments')


def _already_enrolled():
    return error('CONFLICT', 'Already enrolled in this course', 409)


@bp.route('', methods=['POST'])
@token_required
@handle_failure('ENROLL_FAILED', 'Failed to enroll')
def enroll():
    data = request.get_json(silent=True) or {}
    course_id = data.get('courseId')
    uid = get_current_identity().uid

    if not isinstance(course_id, str) or not course_id:
        return bad_request('courseId is required')
    if not dao.get_course(course_id):
        return not_found('Course not found')

    # Legacy enrollments may live under random IDs, so the query runs first.
    if dao.is_enrolled(uid, course_id):
        return _already_enrolled()
    try:
        enrollment_id, enrollment_data = dao.create_enrollment(uid, course_id)
    except AlreadyExists:
        return _already_enrolled()

    return success({'id': enrollment_id, **dao.strip_sentinels(enrollment_data)}, 201)


@bp.route('/my', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch enrollments')
def my_enrollments():
    return success(dao.get_enrollments_by_user(get_current_identity().uid))


@bp.route('/<course_id>/status', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to check enrollment status')
def enrollment_status(course_id):
    return success({'enrolled': dao.is_enrolled(get_current_identity().uid, course_id)})
