"""
Firestore Data Access Object (DAO) layer.

Route files call functions from this module instead of touching the
Firestore client directly. Every read returns plain dicts whose timestamps
have been normalized to ISO-8601 strings, so they can go straight into a
JSON response.
"""

from datetime import date, datetime, timezone

from google.cloud.firestore_v1 import SERVER_TIMESTAMP, ArrayUnion, FieldFilter

from lms_api.firebase_init import get_db
from lms_api.firestore_models import round_percent


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _iso(value):
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'
    return value.isoformat()


def normalize_firestore_data(value):
    """Recursively convert timestamps and dates inside ``value`` to ISO strings."""
    # DatetimeWithNanoseconds is a datetime subclass
    if isinstance(value, (datetime, date)):
        return _iso(value)
    if isinstance(value, dict):
        return {key: normalize_firestore_data(nested) for key, nested in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_firestore_data(item) for item in value]
    return value


def doc_to_dict(doc_snapshot, id_field='id'):
    """Convert a DocumentSnapshot to a normalized dict with its ID merged in."""
    if not doc_snapshot.exists:
        return None
    d = normalize_firestore_data(doc_snapshot.to_dict() or {})
    d[id_field] = doc_snapshot.id
    return d


def query_to_list(query_ref, id_field='id'):
    """Run a query and return a list of dicts."""
    return [doc_to_dict(doc, id_field) for doc in query_ref.stream()]


def strip_sentinels(data):
    """Replace server-assigned timestamps with None so a write payload can be echoed."""
    return {key: (None if value is SERVER_TIMESTAMP else value) for key, value in data.items()}


def _first(query_ref):
    for doc in query_ref.limit(1).stream():
        return doc
    return None


# ========================================================================
# Users  (collection: users)
# ========================================================================

def _user_ref(uid):
    return get_db().collection('users').document(uid)


def get_user(uid):
    """Get a user document by UID. Returns dict (keyed by 'uid') or None."""
    return doc_to_dict(_user_ref(uid).get(), id_field='uid')


def list_users(role=None):
    """Get all users, optionally only those with the given role."""
    q = get_db().collection('users')
    if role:
        q = q.where(filter=FieldFilter('role', '==', role))
    return query_to_list(q, id_field='uid')


def create_user(uid, data):
    """Create a user document with the given UID as the document ID."""
    data.setdefault('createdAt', SERVER_TIMESTAMP)
    _user_ref(uid).set(data)


def merge_user(uid, data):
    """Merge fields into a user document, creating it if needed."""
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _user_ref(uid).set(data, merge=True)


def update_user(uid, data):
    """Update fields on an existing user document."""
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _user_ref(uid).update(data)


def get_leaderboard():
    """Users ordered by totalPoints, highest first."""
    docs = (
        get_db().collection('users')
        .order_by('totalPoints', direction='DESCENDING')
        .stream()
    )
    board = []
    for doc in docs:
        data = doc.to_dict() or {}
        points = data.get('totalPoints')
        board.append({
            'uid': doc.id,
            'name': data.get('name') or data.get('displayName') or '',
            'totalPoints': points if isinstance(points, (int, float)) and not isinstance(points, bool) else 0,
        })
    return board


# ========================================================================
# Courses  (collection: courses)
# ========================================================================

def _course_ref(course_id):
    return get_db().collection('courses').document(course_id)


def get_course(course_id):
    """Get a course by ID. Returns dict or None."""
    return doc_to_dict(_course_ref(course_id).get())


def list_courses(published_only=True):
    """Get courses; unpublished ones are left out unless ``published_only`` is False."""
    q = get_db().collection('courses')
    if published_only:
        q = q.where(filter=FieldFilter('isPublished', '==', True))
    return query_to_list(q)


def find_course_by_title(title):
    """Get the first course with exactly this title. Returns dict or None."""
    doc = _first(get_db().collection('courses').where(filter=FieldFilter('title', '==', title)))
    return doc_to_dict(doc) if doc else None


def create_course(data):
    """Create a new course. Returns the generated doc ID."""
    data.setdefault('createdAt', SERVER_TIMESTAMP)
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _, doc_ref = get_db().collection('courses').add(data)
    return doc_ref.id


def update_course(course_id, data):
    """Update fields on an existing course."""
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _course_ref(course_id).update(data)


def delete_course(course_id):
    _course_ref(course_id).delete()


# ========================================================================
# Chapters  (collection: courses/{course_id}/chapters)
# ========================================================================

def _chapters(course_id):
    return _course_ref(course_id).collection('chapters')


def list_chapters(course_id):
    """Get all chapters of a course, ordered by 'order'."""
    return query_to_list(_chapters(course_id).order_by('order'))


def count_chapters(course_id):
    return sum(1 for _ in _chapters(course_id).stream())


def get_chapter(course_id, chapter_id):
    """Get a chapter by ID. Returns dict or None."""
    return doc_to_dict(_chapters(course_id).document(chapter_id).get())


def create_chapter(course_id, data):
    """Create a chapter. Returns the generated doc ID."""
    data.setdefault('createdAt', SERVER_TIMESTAMP)
    _, doc_ref = _chapters(course_id).add(data)
    return doc_ref.id


def update_chapter(course_id, chapter_id, data):
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _chapters(course_id).document(chapter_id).update(data)


def delete_chapter(course_id, chapter_id):
    _chapters(course_id).document(chapter_id).delete()


# ========================================================================
# Quizzes  (collection: courses/{course_id}/quizzes)
# ========================================================================

def _quizzes(course_id):
    return _course_ref(course_id).collection('quizzes')


def list_quizzes(course_id):
    """Get all quizzes of a course."""
    return query_to_list(_quizzes(course_id))


def get_quiz(course_id, quiz_id):
    """Get a quiz by ID. Returns dict or None."""
    return doc_to_dict(_quizzes(course_id).document(quiz_id).get())


def create_quiz(course_id, data):
    """Create a quiz. Returns the generated doc ID."""
    data.setdefault('createdAt', SERVER_TIMESTAMP)
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _, doc_ref = _quizzes(course_id).add(data)
    return doc_ref.id


def update_quiz(course_id, quiz_id, data):
    data.setdefault('updatedAt', SERVER_TIMESTAMP)
    _quizzes(course_id).document(quiz_id).update(data)


def delete_quiz(course_id, quiz_id):
    _quizzes(course_id).document(quiz_id).delete()


# ========================================================================
# Quiz Results  (collection: quizResults)
# ========================================================================

def create_quiz_result(data):
    """Append a quiz submission. Returns the generated doc ID."""
    data.setdefault('submittedAt', SERVER_TIMESTAMP)
    _, doc_ref = get_db().collection('quizResults').add(data)
    return doc_ref.id


def get_quiz_results(course_id, quiz_id, user_id=None):
    """Get submissions for a quiz, optionally only those of one user."""
    q = (
        get_db().collection('quizResults')
        .where(filter=FieldFilter('courseId', '==', course_id))
        .where(filter=FieldFilter('quizId', '==', quiz_id))
    )
    if user_id is not None:
        q = q.where(filter=FieldFilter('userId', '==', user_id))
    return query_to_list(q)


# ========================================================================
# Enrollments  (collection: enrollments)
# ========================================================================

def _enrollment_id(course_id, user_id):
    return f"{course_id}_{user_id}"


def find_enrollment(user_id, course_id):
    """Find any enrollment matching the user and course. Returns dict or None."""
    doc = _first(
        get_db().collection('enrollments')
        .where(filter=FieldFilter('userId', '==', user_id))
        .where(filter=FieldFilter('courseId', '==', course_id))
    )
    return doc_to_dict(doc) if doc else None


def is_enrolled(user_id, course_id):
    """Check whether a user is enrolled in a course."""
    return find_enrollment(user_id, course_id) is not None


def create_enrollment(user_id, course_id):
    """Create an enrollment under the composite ID course_id + user_id.

    Raises google.api_core.exceptions.AlreadyExists if the document exists.
    Returns (doc_id, data).
    """
    doc_id = _enrollment_id(course_id, user_id)
    data = {
        'userId': user_id,
        'courseId': course_id,
        'enrolledAt': SERVER_TIMESTAMP,
    }
    get_db().collection('enrollments').document(doc_id).create(data)
    return doc_id, data


def get_enrollments_by_user(user_id):
    """Get all enrollments for a user."""
    return query_to_list(
        get_db().collection('enrollments')
        .where(filter=FieldFilter('userId', '==', user_id))
    )


# ========================================================================
# Progress  (collection: progress)
# ========================================================================

def _progress_id(user_id, course_id):
    return f"{user_id}_{course_id}"


def get_progress(user_id, course_id):
    """Get the progress record of a user in a course. Returns dict or None."""
    doc = get_db().collection('progress').document(_progress_id(user_id, course_id)).get()
    return doc_to_dict(doc)


def get_progress_by_user(user_id):
    """Get all progress records for a user."""
    return query_to_list(
        get_db().collection('progress')
        .where(filter=FieldFilter('userId', '==', user_id))
    )


def record_chapter_completion(user_id, course_id, chapter_id):
    """Add a chapter to the user's completed set and recompute the percentage.

    The chapter is added with ArrayUnion so concurrent completions never drop
    each other; the percentage is recomputed from the stored set afterwards.
    Returns (progress dict, created flag).
    """
    progress_id = _progress_id(user_id, course_id)
    ref = get_db().collection('progress').document(progress_id)
    created = not ref.get().exists
    total_chapters = count_chapters(course_id)

    ref.set({
        'userId': user_id,
        'courseId': course_id,
        'completedChapters': ArrayUnion([chapter_id]),
        'updatedAt': SERVER_TIMESTAMP,
    }, merge=True)

    completed = (ref.get().to_dict() or {}).get('completedChapters') or []
    percentage = min(round_percent(len(completed), total_chapters), 100)
    ref.update({'percentage': percentage})

    return {
        'id': progress_id,
        'userId': user_id,
        'courseId': course_id,
        'completedChapters': list(completed),
        'percentage': percentage,
    }, created


# ========================================================================
# Chat History  (collection: chatHistory/{uid}/sessions/{session_id})
# ========================================================================

def _chat_sessions(user_id):
    return get_db().collection('chatHistory').document(user_id).collection('sessions')


def add_chat_message(user_id, session_id, role, content):
    """Append a message to a chat session. Returns the generated doc ID."""
    _, doc_ref = _chat_sessions(user_id).document(session_id).collection('messages').add({
        'role': role,
        'content': content,
        'timestamp': SERVER_TIMESTAMP,
    })
    return doc_ref.id


def touch_chat_session(user_id, session_id, last_message):
    """Update session metadata after a new message."""
    _chat_sessions(user_id).document(session_id).set({
        'lastMessage': last_message,
        'updatedAt': SERVER_TIMESTAMP,
    }, merge=True)


def list_chat_sessions(user_id):
    """Get a user's chat sessions, most recently updated first."""
    return query_to_list(
        _chat_sessions(user_id).order_by('updatedAt', direction='DESCENDING')
    )


def list_chat_messages(user_id, session_id):
    """Get the messages of a chat session, oldest first."""
    return query_to_list(
        _chat_sessions(user_id).document(session_id)
        .collection('messages')
        .order_by('timestamp')
    )
