from datetime import timedelta

from lms_api.firebase_init import get_bucket


def build_object_path(file_name, folder=None):
    """Join an optional folder and a file name into a bucket path."""
    folder = (folder or '').strip('/')
    return f'{folder}/{file_name}' if folder else file_name


def get_upload_url(storage_path, content_type, expiration_minutes=15):
    """Get a signed URL that lets the holder PUT one object.

    Args:
        storage_path: path in the bucket (e.g. 'courses/abc/cover.png')
        content_type: MIME type the upload must be sent with
        expiration_minutes: URL validity in minutes

    Returns:
        Signed URL string
    """
    blob = get_bucket().blob(storage_path)
    return blob.generate_signed_url(
        version='v4',
        expiration=timedelta(minutes=expiration_minutes),
        method='PUT',
        content_type=content_type,
    )


def get_download_url(storage_path, expiration_minutes=60):
    """Get a signed URL for temporary read access.

    Returns:
        Signed URL string, or None if the object does not exist
    """
    blob = get_bucket().blob(storage_path)
    if not blob.exists():
        return None
    return blob.generate_signed_url(
        version='v4',
        expiration=timedelta(minutes=expiration_minutes),
        method='GET',
    )
