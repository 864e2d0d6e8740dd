from types import SimpleNamespace

import pytest

from config import TestConfig
from lms_api import create_app
from lms_api.firebase_init import FirebaseClients

from tests.fakes import FakeAuth, FakeBucket, FakeFirestore


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def fake_auth():
    return FakeAuth()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def app(db, fake_auth, bucket):
    return create_app(TestConfig, clients=FirebaseClients(db=db, auth=fake_auth, bucket=bucket))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(db, fake_auth):
    """Seed one account per role and return their auth headers, keyed by name."""
    accounts = {
        'student': ('stu-1', 'student'),
        'other_student': ('stu-2', 'student'),
        'instructor': ('ins-1', 'instructor'),
        'admin': ('adm-1', 'admin'),
    }
    headers = {}
    for name, (uid, role) in accounts.items():
        db.put(f'users/{uid}', {
            'uid': uid,
            'email': f'{uid}@example.com',
            'name': name.replace('_', ' ').title(),
            'role': role,
            'totalPoints': 0,
            'isActive': True,
        })
        fake_auth.users[uid] = SimpleNamespace(uid=uid, email=f'{uid}@example.com', display_name=None, disabled=False)
        headers[name] = bearer(fake_auth.issue_token(uid, role=role))
    return headers


@pytest.fixture
def course(db):
    """A published course with three chapters and a four-question quiz."""
    db.put('courses/py101', {'title': 'Python 101', 'description': '', 'thumbnailUrl': '', 'isPublished': True})
    for i, chapter_id in enumerate(['ch-a', 'ch-b', 'ch-c']):
        db.put(f'courses/py101/chapters/{chapter_id}', {
            'title': f'Chapter {i + 1}', 'content': '', 'videoUrl': '', 'order': i + 1,
        })
    db.put('courses/py101/quizzes/q1', {
        'title': 'Basics',
        'questions': [
            {'question': 'one?', 'options': ['a', 'b'], 'correctAnswer': 0},
            {'question': 'two?', 'options': ['a', 'b'], 'correctAnswer': 1},
            {'question': 'three?', 'options': ['a', 'b', 'c'], 'correctAnswer': 2},
            {'question': 'four?', 'options': ['a', 'b'], 'correctAnswer': 0},
        ],
    })
    return 'py101'


@pytest.fixture
def enrolled(db, course):
    """Enroll the default student in the course fixture."""
    db.put(f'enrollments/{course}_stu-1', {'userId': 'stu-1', 'courseId': course})
    return course
