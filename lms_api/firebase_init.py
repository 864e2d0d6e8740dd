import os
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage, auth
from flask import current_app

EXTENSION_KEY = 'firebase'


@dataclass(frozen=True)
class FirebaseClients:
    """Process-wide Firebase handles, built once at bootstrap and injected into the app."""
    db: Any
    auth: Any
    bucket: Optional[Any] = None


def _get(app_config, key, default=None):
    value = app_config.get(key) if app_config else None
    if value:
        return value
    return os.environ.get(key, default)


def _credentials(app_config):
    project_id = _get(app_config, 'FIREBASE_PROJECT_ID')
    client_email = _get(app_config, 'FIREBASE_CLIENT_EMAIL')
    private_key = _get(app_config, 'FIREBASE_PRIVATE_KEY')

    if project_id and client_email and private_key:
        return credentials.Certificate({
            'type': 'service_account',
            'project_id': project_id,
            'private_key': private_key.replace('\\n', '\n'),
            'client_email': client_email,
            'token_uri': 'https://oauth2.googleapis.com/token',
        })

    cred_path = _get(app_config, 'GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')
    if cred_path and os.path.exists(cred_path):
        return credentials.Certificate(cred_path)
    return credentials.ApplicationDefault()


def init_firebase(app_config=None):
    """Initialize the default Firebase app (once) and return its clients."""
    bucket_name = _get(app_config, 'FIREBASE_STORAGE_BUCKET', '')

    try:
        fb_app = firebase_admin.get_app()
    except ValueError:
        options = {}
        project_id = _get(app_config, 'FIREBASE_PROJECT_ID')
        if project_id:
            options['projectId'] = project_id
        if bucket_name:
            options['storageBucket'] = bucket_name
        fb_app = firebase_admin.initialize_app(_credentials(app_config), options=options or None)

    bucket = storage.bucket(bucket_name, app=fb_app) if bucket_name else None
    return FirebaseClients(db=firestore.client(app=fb_app), auth=auth, bucket=bucket)


def _clients():
    return current_app.extensions[EXTENSION_KEY]


def get_db():
    return _clients().db


def get_auth():
    return _clients().auth


def get_bucket():
    bucket = _clients().bucket
    if bucket is None:
        raise RuntimeError('FIREBASE_STORAGE_BUCKET is not configured')
    return bucket
