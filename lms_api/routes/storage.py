from flask import Blueprint, current_app, request

from lms_api.decorators import token_required, role_required
from lms_api.responses import success, bad_request, not_found, handle_failure
from lms_api.services.storage import build_object_path, get_upload_url, get_download_url

bp = Blueprint('storage', __name__, url_prefix='/v1/storage')


@bp.route('/upload-url', methods=['POST'])
@token_required
@role_required('admin')
@handle_failure('UPLOAD_URL_FAILED', 'Failed to generate upload URL')
def upload_url():
    data = request.get_json(silent=True) or {}
    file_name = data.get('fileName')
    content_type = data.get('contentType')

    if not file_name or not content_type:
        return bad_request('fileName and contentType are required')

    file_path = build_object_path(file_name, data.get('folder'))
    url = get_upload_url(
        file_path,
        content_type,
        expiration_minutes=current_app.config['UPLOAD_URL_EXPIRATION_MINUTES'],
    )
    return success({'uploadUrl': url, 'filePath': file_path})


@bp.route('/download-url/<file_id>', methods=['GET'])
@token_required
@handle_failure('DOWNLOAD_URL_FAILED', 'Failed to generate download URL')
def download_url(file_id):
    file_path = request.args.get('path') or file_id
    url = get_download_url(
        file_path,
        expiration_minutes=current_app.config['DOWNLOAD_URL_EXPIRATION_MINUTES'],
    )
    if url is None:
        return not_found('File not found')
    return success({'downloadUrl': url, 'filePath': file_path})
