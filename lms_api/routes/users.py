import logging

from flask import Blueprint, request
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from lms_api.decorators import token_required, role_required, get_current_identity
from lms_api.firebase_init import get_auth
from lms_api import firestore_dao as dao
from lms_api.firestore_models import UserProfile
from lms_api.responses import success, error, bad_request, not_found, handle_failure

logger = logging.getLogger(__name__)

bp = Blueprint('users', __name__, url_prefix='/v1/users')


def _matches(user, needle):
    name = str(user.get('name') or '').lower()
    email = str(user.get('email') or '').lower()
    return needle in name or needle in email


@bp.route('', methods=['GET'])
@token_required
@role_required('admin')
@handle_failure('FETCH_FAILED', 'Failed to fetch users')
def list_users():
    users = dao.list_users(role=request.args.get('role'))
    search = request.args.get('search')
    if search:
        needle = search.lower()
        users = [u for u in users if _matches(u, needle)]
    return success(users)


@bp.route('/<uid>', methods=['GET'])
@token_required
@role_required('admin')
@handle_failure('FETCH_FAILED', 'Failed to fetch user')
def get_user(uid):
    user = dao.get_user(uid)
    if not user:
        return not_found('User not found')
    return success(user)


@bp.route('/<uid>', methods=['PATCH'])
@token_required
@role_required('admin')
@handle_failure('UPDATE_FAILED', 'Failed to update user')
def update_user(uid):
    data = request.get_json(silent=True) or {}
    if not dao.get_user(uid):
        return not_found('User not found')

    updates = {}
    auth_updates = {}
    if 'name' in data:
        updates['name'] = data['name']
        if data['name']:
            auth_updates['display_name'] = data['name']
    if 'email' in data:
        updates['email'] = data['email']
        if data['email']:
            auth_updates['email'] = data['email']

    dao.update_user(uid, updates)
    if auth_updates:
        get_auth().update_user(uid, **auth_updates)
    return success(dao.get_user(uid))


@bp.route('/<uid>', methods=['DELETE'])
@token_required
@role_required('admin')
@handle_failure('DELETE_FAILED', 'Failed to delete user')
def disable_user(uid):
    get_auth().update_user(uid, disabled=True)
    dao.update_user(uid, {'isActive': False})
    logger.info('Disabled user %s', uid)
    return success({'uid': uid, 'isActive': False})


@bp.route('/upsert', methods=['POST'])
@token_required
@handle_failure('UPSERT_FAILED', 'Failed to upsert user profile')
def upsert_user():
    identity = get_current_identity()
    data = request.get_json(silent=True) or {}
    uid = data.get('uid') or identity.uid
    email = data.get('email')
    display_name = data.get('displayName')

    if not all(isinstance(v, str) and v for v in (uid, email)):
        return bad_request('uid and email are required')
    if uid != identity.uid and not identity.is_admin:
        return error('FORBIDDEN', 'Insufficient permissions', 403)

    existing = dao.get_user(uid)
    if not existing:
        profile = UserProfile(uid=uid, email=email, name=display_name or '')
        dao.create_user(uid, {**profile.to_dict(), 'updatedAt': SERVER_TIMESTAMP})
    else:
        dao.merge_user(uid, {
            'email': email,
            'name': display_name or existing.get('name') or '',
        })

    return success(dao.get_user(uid))
