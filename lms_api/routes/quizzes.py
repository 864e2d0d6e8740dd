from flask import Blueprint, request

from lms_api.decorators import token_required, role_required, enrollment_required, get_current_identity
from lms_api import firestore_dao as dao
from lms_api.firestore_models import QuizResult, parse_questions, public_questions, grade_answers
from lms_api.responses import success, bad_request, not_found, handle_failure

bp = Blueprint('quizzes', __name__, url_prefix='/v1/courses/<course_id>/quizzes')


def _for_caller(quiz):
    """Hide the answer key from everyone but admins."""
    if get_current_identity().is_admin:
        return quiz
    return {**quiz, 'questions': public_questions(quiz.get('questions'))}


@bp.route('', methods=['GET'])
@token_required
@enrollment_required
@handle_failure('FETCH_FAILED', 'Failed to fetch quizzes')
def list_quizzes(course_id):
    return success([_for_caller(quiz) for quiz in dao.list_quizzes(course_id)])


@bp.route('/<quiz_id>', methods=['GET'])
@token_required
@enrollment_required
@handle_failure('FETCH_FAILED', 'Failed to fetch quiz')
def get_quiz(course_id, quiz_id):
    quiz = dao.get_quiz(course_id, quiz_id)
    if not quiz:
        return not_found('Quiz not found')
    return success(_for_caller(quiz))


@bp.route('', methods=['POST'])
@token_required
@role_required('admin')
@handle_failure('CREATE_FAILED', 'Failed to create quiz')
def create_quiz(course_id):
    data = request.get_json(silent=True) or {}
    title = data.get('title')
    if not title or not isinstance(data.get('questions'), list):
        return bad_request('title and questions array are required')
    try:
        questions = parse_questions(data['questions'])
    except ValueError as e:
        return bad_request(str(e))

    quiz_data = {
        'title': title,
        'questions': [q.to_dict() for q in questions],
    }
    quiz_id = dao.create_quiz(course_id, quiz_data)
    return success({'id': quiz_id, **dao.strip_sentinels(quiz_data)}, 201)


@bp.route('/<quiz_id>', methods=['PATCH'])
@token_required
@role_required('admin')
@handle_failure('UPDATE_FAILED', 'Failed to update quiz')
def update_quiz(course_id, quiz_id):
    data = request.get_json(silent=True) or {}
    if not dao.get_quiz(course_id, quiz_id):
        return not_found('Quiz not found')

    updates = {}
    if 'title' in data:
        updates['title'] = data['title']
    if 'questions' in data:
        try:
            updates['questions'] = [q.to_dict() for q in parse_questions(data['questions'])]
        except ValueError as e:
            return bad_request(str(e))

    dao.update_quiz(course_id, quiz_id, updates)
    return success(dao.get_quiz(course_id, quiz_id))


@bp.route('/<quiz_id>', methods=['DELETE'])
@token_required
@role_required('admin')
@handle_failure('DELETE_FAILED', 'Failed to delete quiz')
def delete_quiz(course_id, quiz_id):
    dao.delete_quiz(course_id, quiz_id)
    return success({'id': quiz_id, 'deleted': True})


@bp.route('/<quiz_id>/submit', methods=['POST'])
@token_required
@enrollment_required
@handle_failure('SUBMIT_FAILED', 'Failed to submit quiz')
def submit_quiz(course_id, quiz_id):
    data = request.get_json(silent=True) or {}
    answers = data.get('answers')
    if not isinstance(answers, list):
        return bad_request('answers array is required')
    if not all(isinstance(a, int) and not isinstance(a, bool) for a in answers):
        return bad_request('answers must be option indexes')

    quiz = dao.get_quiz(course_id, quiz_id)
    if not quiz:
        return not_found('Quiz not found')

    questions = quiz.get('questions') or []
    if len(answers) != len(questions):
        return bad_request(f'Expected {len(questions)} answers, got {len(answers)}')

    correct_count, score = grade_answers(questions, answers)
    result_data = QuizResult(
        user_id=get_current_identity().uid,
        course_id=course_id,
        quiz_id=quiz_id,
        answers=answers,
        correct_count=correct_count,
        total_questions=len(questions),
        score=score,
    ).to_dict()
    result_id = dao.create_quiz_result(result_data)
    return success({'id': result_id, **dao.strip_sentinels(result_data)})


@bp.route('/<quiz_id>/results', methods=['GET'])
@token_required
@enrollment_required
@handle_failure('FETCH_FAILED', 'Failed to fetch quiz results')
def list_results(course_id, quiz_id):
    identity = get_current_identity()
    user_id = None if identity.is_admin else identity.uid
    return success(dao.get_quiz_results(course_id, quiz_id, user_id=user_id))
