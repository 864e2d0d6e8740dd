from flask import Blueprint, current_app, jsonify

bp = Blueprint('main', __name__)


@bp.route('/health')
def health():
    return jsonify({'ok': True, 'service': current_app.config['SERVICE_NAME']}), 200
