from flask import Blueprint, current_app, request

from lms_api.decorators import token_required, get_current_identity
from lms_api import firestore_dao as dao
from lms_api.responses import success, bad_request, handle_failure

bp = Blueprint('chatbot', __name__, url_prefix='/v1/chatbot')


def _assistant_reply(message):
    # TODO: forward to an AI provider once one is chosen; until then every message gets the configured reply.
    return current_app.config['CHATBOT_PLACEHOLDER_REPLY']


@bp.route('/message', methods=['POST'])
@token_required
@handle_failure('CHATBOT_FAILED', 'Failed to process chatbot message')
def send_message():
    data = request.get_json(silent=True) or {}
    message = data.get('message')
    session_id = data.get('sessionId')

    if not all(isinstance(v, str) and v for v in (message, session_id)):
        return bad_request('message and sessionId are required')

    uid = get_current_identity().uid
    dao.add_chat_message(uid, session_id, 'user', message)
    reply = _assistant_reply(message)
    dao.add_chat_message(uid, session_id, 'assistant', reply)
    dao.touch_chat_session(uid, session_id, message)

    return success({'sessionId': session_id, 'response': reply})


@bp.route('/sessions', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch chat sessions')
def list_sessions():
    return success(dao.list_chat_sessions(get_current_identity().uid))


@bp.route('/sessions/<session_id>/messages', methods=['GET'])
@token_required
@handle_failure('FETCH_FAILED', 'Failed to fetch chat messages')
def list_messages(session_id):
    return success(dao.list_chat_messages(get_current_identity().uid, session_id))
