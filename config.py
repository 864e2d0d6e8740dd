import os
from dotenv import load_dotenv

load_dotenv()


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    SERVICE_NAME = os.environ.get('SERVICE_NAME', 'lms-be-firebase')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')
    FIREBASE_CLIENT_EMAIL = os.environ.get('FIREBASE_CLIENT_EMAIL')
    FIREBASE_PRIVATE_KEY = (os.environ.get('FIREBASE_PRIVATE_KEY') or '').replace('\\n', '\n') or None
    GOOGLE_APPLICATION_CREDENTIALS = os.environ.get(
        'GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json'
    )
    FIREBASE_STORAGE_BUCKET = os.environ.get('FIREBASE_STORAGE_BUCKET', '')

    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get('CORS_ORIGIN', 'http://localhost:3000'))

    UPLOAD_URL_EXPIRATION_MINUTES = int(os.environ.get('UPLOAD_URL_EXPIRATION_MINUTES', 15))
    DOWNLOAD_URL_EXPIRATION_MINUTES = int(os.environ.get('DOWNLOAD_URL_EXPIRATION_MINUTES', 60))

    CHATBOT_PLACEHOLDER_REPLY = os.environ.get(
        'CHATBOT_PLACEHOLDER_REPLY',
        'Thanks for your question. The AI assistant is still under development.'
    )


class TestConfig(Config):
    TESTING = True
    FIREBASE_STORAGE_BUCKET = 'lms-test.appspot.com'
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
