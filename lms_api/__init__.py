import logging

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config

logger = logging.getLogger(__name__)

cors = CORS()

_HTTP_ERROR_CODES = {
    400: 'BAD_REQUEST',
    401: 'UNAUTHORIZED',
    403: 'FORBIDDEN',
    404: 'NOT_FOUND',
    405: 'METHOD_NOT_ALLOWED',
    500: 'INTERNAL_ERROR',
}


def create_app(config_class=Config, clients=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize Firebase
    from lms_api.firebase_init import EXTENSION_KEY, init_firebase
    if clients is None:
        clients = init_firebase(app.config)
    app.extensions[EXTENSION_KEY] = clients

    cors.init_app(app, origins=app.config.get('CORS_ALLOWED_ORIGINS') or [])

    from lms_api.responses import error

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        code = _HTTP_ERROR_CODES.get(e.code, 'HTTP_ERROR')
        return error(code, e.description or e.name, e.code)

    # Register blueprints
    from lms_api.routes import (
        main, auth, courses, chapters, quizzes, enrollments,
        progress, leaderboard, users, storage, chatbot
    )
    app.register_blueprint(main.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(courses.bp)
    app.register_blueprint(chapters.bp)
    app.register_blueprint(quizzes.bp)
    app.register_blueprint(enrollments.bp)
    app.register_blueprint(progress.bp)
    app.register_blueprint(leaderboard.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(storage.bp)
    app.register_blueprint(chatbot.bp)

    logger.debug('%s ready', app.config['SERVICE_NAME'])
    return app
