from flask import Blueprint, request

from lms_api.decorators import token_required, optional_auth, role_required, get_current_identity
from lms_api import firestore_dao as dao
from lms_api.firestore_models import Course, COURSE_FIELDS, parse_published
from lms_api.responses import success, bad_request, not_found, handle_failure

bp = Blueprint('courses', __name__, url_prefix='/v1/courses')


@bp.route('', methods=['GET'])
@optional_auth
@handle_failure('FETCH_FAILED', 'Failed to fetch courses')
def list_courses():
    identity = get_current_identity()
    is_admin = identity is not None and identity.is_admin
    return success(dao.list_courses(published_only=not is_admin))


@bp.route('/<course_id>', methods=['GET'])
@handle_failure('FETCH_FAILED', 'Failed to fetch course')
def get_course(course_id):
    course = dao.get_course(course_id)
    if not course:
        return not_found('Course not found')
    return success(course)


@bp.route('', methods=['POST'])
@token_required
@role_required('admin')
@handle_failure('CREATE_FAILED', 'Failed to create course')
def create_course():
    data = request.get_json(silent=True) or {}
    if not data.get('title'):
        return bad_request('title is required')

    try:
        course_data = Course.from_payload(data).to_dict()
    except ValueError as e:
        return bad_request(str(e))
    course_id = dao.create_course(course_data)
    return success({'id': course_id, **dao.strip_sentinels(course_data)}, 201)


@bp.route('/<course_id>', methods=['PATCH'])
@token_required
@role_required('admin')
@handle_failure('UPDATE_FAILED', 'Failed to update course')
def update_course(course_id):
    data = request.get_json(silent=True) or {}
    if not dao.get_course(course_id):
        return not_found('Course not found')

    updates = {key: data[key] for key in COURSE_FIELDS if key in data}
    if 'isPublished' in updates:
        try:
            updates['isPublished'] = parse_published(updates['isPublished'])
        except ValueError as e:
            return bad_request(str(e))
    dao.update_course(course_id, updates)
    return success(dao.get_course(course_id))


@bp.route('/<course_id>', methods=['DELETE'])
@token_required
@role_required('admin')
@handle_failure('DELETE_FAILED', 'Failed to delete course')
def delete_course(course_id):
    dao.delete_course(course_id)
    return success({'id': course_id, 'deleted': True})
