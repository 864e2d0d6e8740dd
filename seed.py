import logging

from google.api_core.exceptions import AlreadyExists

from lms_api import create_app
from lms_api.firebase_init import get_auth
from lms_api import firestore_dao as dao
from lms_api.firestore_models import Chapter, Course, QuizQuestion, UserProfile

logger = logging.getLogger('seed')

PASSWORD = 'password123'


def create_firebase_user(email, name, role):
    auth = get_auth()
    try:
        fb_user = auth.create_user(email=email, password=PASSWORD, display_name=name)
    except auth.EmailAlreadyExistsError:
        fb_user = auth.get_user_by_email(email)
    uid = fb_user.uid
    if dao.get_user(uid):
        # keep points and account state earned since the last run
        dao.merge_user(uid, {'email': email, 'name': name, 'role': role})
    else:
        dao.create_user(uid, UserProfile(uid=uid, email=email, name=name, role=role).to_dict())
    auth.set_custom_user_claims(uid, {'role': role})
    return uid


def get_or_create_course(course):
    """Return (course_id, created). Courses are matched by title."""
    existing = dao.find_course_by_title(course.title)
    if existing:
        return existing['id'], False
    return dao.create_course(course.to_dict()), True


def seed_database(app=None):
    app = app or create_app()
    with app.app_context():
        logger.info('Creating users...')
        create_firebase_user('admin@example.com', 'Admin', 'admin')
        create_firebase_user('instructor@example.com', 'Instructor', 'instructor')
        student_uids = [
            create_firebase_user(f'student{i}@example.com', f'Student {i}', 'student')
            for i in range(1, 6)
        ]

        logger.info('Creating courses...')
        intro_id, intro_created = get_or_create_course(Course(
            title='Introduction to Python',
            description='Install Python and write your first programs.',
            is_published=True,
        ))
        draft_id, draft_created = get_or_create_course(Course(
            title='Data Analysis (draft)',
            description='Not published yet; only admins can see it.',
        ))

        if intro_created:
            logger.info('Creating chapters and quizzes for %s...', intro_id)
            chapters = [
                ('Setting up your environment', 'Install Python and VS Code.'),
                ('Hello, world', 'Write and run your first program.'),
                ('Variables and types', 'Strings, numbers and booleans.'),
                ('Control flow', 'if/else and loops.'),
            ]
            for i, (title, content) in enumerate(chapters):
                dao.create_chapter(intro_id, Chapter(title=title, content=content, order=i + 1).to_dict())

            questions = [
                QuizQuestion('Which function prints to the screen?', ['print()', 'input()', 'len()'], 0),
                QuizQuestion('What does range(3) produce?', ['1, 2, 3', '0, 1, 2', '0, 1, 2, 3'], 1),
                QuizQuestion('Which type is immutable?', ['list', 'dict', 'tuple'], 2),
                QuizQuestion('How do you start a comment?', ['//', '#', '--'], 1),
            ]
            dao.create_quiz(intro_id, {
                'title': 'Python basics',
                'questions': [q.to_dict() for q in questions],
            })
        else:
            logger.info('  %s already exists, leaving its content alone', intro_id)

        if draft_created:
            dao.create_chapter(draft_id, Chapter(title='Loading data', order=1).to_dict())

        logger.info('Creating enrollments...')
        for uid in student_uids[:3]:
            try:
                dao.create_enrollment(uid, intro_id)
            except AlreadyExists:
                logger.info('  %s is already enrolled', uid)

        logger.info('Seed complete. Accounts use password %r:', PASSWORD)
        logger.info('  admin@example.com, instructor@example.com, student1..5@example.com')


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(message)s')
    seed_database()
