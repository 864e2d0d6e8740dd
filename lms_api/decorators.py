import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, request

from lms_api.firebase_init import get_auth, get_db
from lms_api.firestore_dao import is_enrolled
from lms_api.firestore_models import DEFAULT_ROLE
from lms_api.responses import error

logger = logging.getLogger(__name__)

ROLE_FROM_CLAIM = 'claim'
ROLE_FROM_STORE = 'store'
ROLE_DEFAULT = 'default'
ROLE_STORE_ERROR = 'store_error'

BEARER_PREFIX = 'Bearer '


@dataclass(frozen=True)
class RoleResolution:
    role: str
    source: str


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str
    role: str
    role_source: str = ROLE_FROM_CLAIM

    @property
    def is_admin(self):
        return self.role == 'admin'


@dataclass(frozen=True)
class AuthResult:
    identity: Optional[Identity] = None
    error: Optional[str] = None


def resolve_role(db, uid, claimed_role=None):
    """Work out the effective role of ``uid``.

    A non-empty role claim on the token wins without touching the store.
    Otherwise the ``role`` field of ``users/{uid}`` is used. A missing
    document or field, or a failed read, falls back to the student role.
    """
    if isinstance(claimed_role, str) and claimed_role:
        return RoleResolution(claimed_role, ROLE_FROM_CLAIM)

    try:
        doc = db.collection('users').document(uid).get()
        if doc.exists:
            role = (doc.to_dict() or {}).get('role')
            if isinstance(role, str) and role:
                return RoleResolution(role, ROLE_FROM_STORE)
    except Exception:
        logger.warning('Role lookup failed for %s, using %s', uid, DEFAULT_ROLE, exc_info=True)
        return RoleResolution(DEFAULT_ROLE, ROLE_STORE_ERROR)

    return RoleResolution(DEFAULT_ROLE, ROLE_DEFAULT)


def authenticate(header, db, auth):
    """Verify a ``Bearer`` Authorization header and build the caller's Identity."""
    if not header or not header.startswith(BEARER_PREFIX):
        return AuthResult(error='Missing or invalid token')

    token = header[len(BEARER_PREFIX):].strip()
    try:
        decoded = auth.verify_id_token(token)
    except Exception as e:
        logger.debug('Token verification failed: %s', e)
        return AuthResult(error='Invalid or expired token')

    uid = decoded['uid']
    resolution = resolve_role(db, uid, decoded.get('role'))
    return AuthResult(identity=Identity(
        uid=uid,
        email=decoded.get('email') or '',
        role=resolution.role,
        role_source=resolution.source,
    ))


def _authenticate_request():
    return authenticate(request.headers.get('Authorization'), get_db(), get_auth())


def get_current_identity():
    """The Identity attached by token_required / optional_auth, or None."""
    return g.get('identity')


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        result = _authenticate_request()
        if result.identity is None:
            return error('UNAUTHORIZED', result.error, 401)
        g.identity = result.identity
        return f(*args, **kwargs)
    return decorated


def optional_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        result = _authenticate_request()
        if result.error:
            logger.debug('Continuing anonymously: %s', result.error)
        g.identity = result.identity
        return f(*args, **kwargs)
    return decorated


def role_required(*roles):
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            identity = get_current_identity()
            if identity is None:
                return error('UNAUTHORIZED', 'Authentication required', 401)
            if identity.role not in roles:
                return error('FORBIDDEN', 'Insufficient permissions', 403)
            return f(*args, **kwargs)
        return decorated
    return decorator


def enrollment_required(f):
    """Let admins and students enrolled in the ``course_id`` route argument through."""
    @wraps(f)
    def decorated(*args, **kwargs):
        identity = get_current_identity()
        if identity is None:
            return error('UNAUTHORIZED', 'Authentication required', 401)
        if identity.is_admin:
            return f(*args, **kwargs)

        course_id = kwargs.get('course_id')
        if not course_id:
            return error('BAD_REQUEST', 'courseId is required', 400)

        try:
            enrolled = is_enrolled(identity.uid, course_id)
        except Exception:
            logger.exception('Enrollment check failed for %s in %s', identity.uid, course_id)
            return error('ENROLLMENT_CHECK_FAILED', 'Failed to verify enrollment', 500)

        if not enrolled:
            return error('FORBIDDEN', 'You must be enrolled in this course', 403)
        return f(*args, **kwargs)
    return decorated
