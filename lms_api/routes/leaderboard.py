from flask import Blueprint

from lms_api import firestore_dao as dao
from lms_api.responses import success, handle_failure

bp = Blueprint('leaderboard', __name__, url_prefix='/v1/leaderboard')


@bp.route('', methods=['GET'])
@handle_failure('FETCH_FAILED', 'Failed to fetch leaderboard')
def leaderboard():
    return success(dao.get_leaderboard())
