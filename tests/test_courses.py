from datetime import datetime, timezone

from tests.conftest import bearer


def _seed_catalog(db):
    db.put('courses/pub', {'title': 'Published', 'isPublished': True})
    db.put('courses/draft', {'title': 'Draft', 'isPublished': False})
    db.put('courses/legacy', {'title': 'No flag'})


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json() == {'ok': True, 'service': 'lms-be-firebase'}


def test_anonymous_listing_hides_unpublished(client, db):
    _seed_catalog(db)
    resp = client.get('/v1/courses')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    assert [c['id'] for c in body['data']] == ['pub']
    assert all(c['isPublished'] is True for c in body['data'])


def test_invalid_token_listing_is_treated_as_anonymous(client, db):
    _seed_catalog(db)
    resp = client.get('/v1/courses', headers=bearer('garbage'))
    assert resp.status_code == 200
    assert [c['id'] for c in resp.get_json()['data']] == ['pub']


def test_student_listing_hides_unpublished(client, db, users):
    _seed_catalog(db)
    resp = client.get('/v1/courses', headers=users['student'])
    assert [c['id'] for c in resp.get_json()['data']] == ['pub']


def test_admin_listing_shows_everything(client, db, users):
    _seed_catalog(db)
    resp = client.get('/v1/courses', headers=users['admin'])
    assert sorted(c['id'] for c in resp.get_json()['data']) == ['draft', 'legacy', 'pub']


def test_get_course_normalizes_timestamps(client, db):
    db.put('courses/c1', {
        'title': 'Timed',
        'isPublished': True,
        'createdAt': datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc),
    })
    resp = client.get('/v1/courses/c1')
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['id'] == 'c1'
    assert data['createdAt'] == '2024-05-01T10:00:00.123Z'


def test_get_missing_course(client):
    resp = client.get('/v1/courses/missing')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == {'code': 'NOT_FOUND', 'message': 'Course not found'}


def test_create_course_requires_title(client, users):
    resp = client.post('/v1/courses', json={'description': 'x'}, headers=users['admin'])
    assert resp.status_code == 400
    assert resp.get_json()['error'] == {'code': 'BAD_REQUEST', 'message': 'title is required'}


def test_create_course_without_auth(client):
    resp = client.post('/v1/courses', json={'title': 'x'})
    assert resp.status_code == 401


def test_create_course(client, db, users):
    resp = client.post('/v1/courses', json={'title': 'New course'}, headers=users['admin'])
    assert resp.status_code == 201
    data = resp.get_json()['data']
    assert data['title'] == 'New course'
    assert data['description'] == ''
    assert data['isPublished'] is False
    assert data['createdAt'] is None

    stored = db.data(f"courses/{data['id']}")
    assert stored['title'] == 'New course'
    assert isinstance(stored['createdAt'], datetime)


def test_update_course(client, db, users):
    db.put('courses/c1', {'title': 'Old', 'isPublished': False})
    resp = client.patch(
        '/v1/courses/c1',
        json={'title': 'New', 'isPublished': True, 'owner': 'ignored'},
        headers=users['admin'],
    )
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['title'] == 'New'
    assert data['isPublished'] is True
    assert 'owner' not in data
    assert data['updatedAt'].endswith('Z')


def test_create_course_rejects_string_flag(client, db, users):
    resp = client.post('/v1/courses', json={'title': 'T', 'isPublished': 'false'}, headers=users['admin'])
    assert resp.status_code == 400
    assert resp.get_json()['error']['message'] == 'isPublished must be a boolean'
    assert db.children('courses') == {}


def test_update_course_rejects_string_flag(client, db, users):
    db.put('courses/c1', {'title': 'Old', 'isPublished': False})
    resp = client.patch('/v1/courses/c1', json={'isPublished': 'true'}, headers=users['admin'])
    assert resp.status_code == 400
    assert db.data('courses/c1')['isPublished'] is False


def test_update_missing_course(client, users):
    resp = client.patch('/v1/courses/none', json={'title': 'x'}, headers=users['admin'])
    assert resp.status_code == 404


def test_delete_course(client, db, users):
    db.put('courses/c1', {'title': 'Bye'})
    resp = client.delete('/v1/courses/c1', headers=users['admin'])
    assert resp.status_code == 200
    assert resp.get_json()['data'] == {'id': 'c1', 'deleted': True}
    assert db.data('courses/c1') is None


def test_store_failure_becomes_500(client, db):
    db.broken.add('courses')
    resp = client.get('/v1/courses')
    assert resp.status_code == 500
    assert resp.get_json()['error'] == {'code': 'FETCH_FAILED', 'message': 'Failed to fetch courses'}


def test_cors_allows_configured_origin(client):
    resp = client.get('/health', headers={'Origin': 'http://localhost:3000'})
    assert resp.headers.get('Access-Control-Allow-Origin') == 'http://localhost:3000'


def test_cors_ignores_other_origins(client):
    resp = client.get('/health', headers={'Origin': 'http://evil.example'})
    assert 'Access-Control-Allow-Origin' not in resp.headers
