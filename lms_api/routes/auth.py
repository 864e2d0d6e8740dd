import logging

from flask import Blueprint, request

from lms_api.decorators import token_required, role_required, get_current_identity
from lms_api.firebase_init import get_auth
from lms_api import firestore_dao as dao
from lms_api.firestore_models import ROLES, UserProfile
from lms_api.responses import success, error, bad_request, not_found, handle_failure

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/v1/auth')


@bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')

    if not all(isinstance(v, str) and v for v in (email, password)):
        return bad_request('email and password are required')

    display_name = data.get('name') or email.split('@')[0]
    auth = get_auth()
    try:
        firebase_user = auth.create_user(
            email=email,
            password=password,
            display_name=display_name,
        )
        profile = UserProfile(uid=firebase_user.uid, email=email, name=display_name)
        auth.set_custom_user_claims(profile.uid, {'role': profile.role})
        dao.create_user(profile.uid, profile.to_dict())
    except Exception as e:
        logger.exception('Registration failed for %s', email)
        return error('REGISTER_FAILED', str(e) or 'Failed to register user', 500)

    logger.info('Registered user %s', profile.uid)
    return success({
        'uid': profile.uid,
        'email': firebase_user.email,
        'name': profile.display_name,
        'role': profile.role,
    }, 201)


@bp.route('/assign-role', methods=['POST'])
@token_required
@role_required('admin')
def assign_role():
    data = request.get_json(silent=True) or {}
    uid = data.get('uid')
    role = data.get('role')

    if not isinstance(uid, str) or not uid or not role:
        return bad_request('uid and role are required')
    if role not in ROLES:
        return bad_request(f"Invalid role. Must be one of: {', '.join(ROLES)}")

    try:
        get_auth().set_custom_user_claims(uid, {'role': role})
        dao.merge_user(uid, {'role': role})
    except Exception as e:
        logger.exception('Role assignment failed for %s', uid)
        return error('ASSIGN_ROLE_FAILED', str(e) or 'Failed to assign role', 500)

    logger.info('Assigned role %s to %s', role, uid)
    return success({'uid': uid, 'role': role})


@bp.route('/me')
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch user profile')
def me():
    user = dao.get_user(get_current_identity().uid)
    if not user:
        return not_found('User profile not found')
    return success(user)
