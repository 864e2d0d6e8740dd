import pytest

from tests.conftest import bearer


# ---------------------------------------------------------------------------
# /v1/auth
# ---------------------------------------------------------------------------

def test_register(client, db, fake_auth):
    resp = client.post('/v1/auth/register', json={'email': 'new@example.com', 'password': 'secret1'})
    assert resp.status_code == 201
    data = resp.get_json()['data']
    assert data['email'] == 'new@example.com'
    assert data['name'] == 'new'
    assert data['role'] == 'student'

    uid = data['uid']
    assert fake_auth.claims[uid] == {'role': 'student'}
    stored = db.data(f'users/{uid}')
    assert stored['role'] == 'student'
    assert stored['totalPoints'] == 0
    assert stored['isActive'] is True


def test_register_requires_credentials(client):
    resp = client.post('/v1/auth/register', json={'email': 'x@example.com'})
    assert resp.status_code == 400


def test_register_surfaces_provider_message(client):
    client.post('/v1/auth/register', json={'email': 'dup@example.com', 'password': 'secret1'})
    resp = client.post('/v1/auth/register', json={'email': 'dup@example.com', 'password': 'secret1'})
    assert resp.status_code == 500
    assert resp.get_json()['error'] == {
        'code': 'REGISTER_FAILED',
        'message': 'The user with the provided email already exists',
    }


def test_me(client, users):
    resp = client.get('/v1/auth/me', headers=users['student'])
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['uid'] == 'stu-1'
    assert data['role'] == 'student'


def test_me_without_profile(client, fake_auth):
    resp = client.get('/v1/auth/me', headers=bearer(fake_auth.issue_token('ghost', role='student')))
    assert resp.status_code == 404


def test_assign_role(client, db, fake_auth, users):
    resp = client.post('/v1/auth/assign-role', json={'uid': 'stu-2', 'role': 'instructor'}, headers=users['admin'])
    assert resp.status_code == 200
    assert resp.get_json()['data'] == {'uid': 'stu-2', 'role': 'instructor'}
    assert fake_auth.claims['stu-2'] == {'role': 'instructor'}
    assert db.data('users/stu-2')['role'] == 'instructor'


def test_assign_invalid_role(client, users):
    resp = client.post('/v1/auth/assign-role', json={'uid': 'stu-2', 'role': 'owner'}, headers=users['admin'])
    assert resp.status_code == 400
    assert resp.get_json()['error']['message'] == 'Invalid role. Must be one of: student, instructor, admin'


def test_assign_role_admin_only(client, users):
    resp = client.post('/v1/auth/assign-role', json={'uid': 'stu-1', 'role': 'admin'}, headers=users['student'])
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# /v1/users
# ---------------------------------------------------------------------------

def test_list_users_admin_only(client, users):
    assert client.get('/v1/users', headers=users['instructor']).status_code == 403
    resp = client.get('/v1/users', headers=users['admin'])
    assert {u['uid'] for u in resp.get_json()['data']} == {'stu-1', 'stu-2', 'ins-1', 'adm-1'}


def test_list_users_filters(client, users):
    by_role = client.get('/v1/users?role=student', headers=users['admin']).get_json()['data']
    assert {u['uid'] for u in by_role} == {'stu-1', 'stu-2'}

    by_search = client.get('/v1/users?search=OTHER', headers=users['admin']).get_json()['data']
    assert [u['uid'] for u in by_search] == ['stu-2']


def test_get_user(client, users):
    assert client.get('/v1/users/ins-1', headers=users['admin']).get_json()['data']['role'] == 'instructor'
    assert client.get('/v1/users/nobody', headers=users['admin']).status_code == 404


def test_patch_user_syncs_auth(client, fake_auth, users):
    resp = client.patch('/v1/users/stu-1', json={'name': 'Renamed', 'email': 'r@example.com'}, headers=users['admin'])
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert (data['name'], data['email']) == ('Renamed', 'r@example.com')
    assert fake_auth.users['stu-1'].display_name == 'Renamed'
    assert fake_auth.users['stu-1'].email == 'r@example.com'


def test_patch_missing_user(client, users):
    assert client.patch('/v1/users/nobody', json={'name': 'x'}, headers=users['admin']).status_code == 404


def test_delete_user_soft_disables(client, db, fake_auth, users):
    resp = client.delete('/v1/users/stu-2', headers=users['admin'])
    assert resp.get_json()['data'] == {'uid': 'stu-2', 'isActive': False}
    assert fake_auth.users['stu-2'].disabled is True
    assert db.data('users/stu-2')['isActive'] is False


def test_upsert_creates_profile(client, db, fake_auth):
    headers = bearer(fake_auth.issue_token('fresh', role='student'))
    resp = client.post('/v1/users/upsert', json={'email': 'fresh@example.com'}, headers=headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['uid'] == 'fresh'
    assert data['name'] == 'fresh'
    assert data['role'] == 'student'
    assert db.data('users/fresh')['totalPoints'] == 0


def test_upsert_merges_existing_profile(client, db, users):
    resp = client.post('/v1/users/upsert', json={'uid': 'stu-1', 'email': 'new@example.com'}, headers=users['student'])
    data = resp.get_json()['data']
    assert data['email'] == 'new@example.com'
    assert data['name'] == 'Student'
    assert data['role'] == 'student'


def test_upsert_other_user_needs_admin(client, users):
    body = {'uid': 'stu-2', 'email': 'x@example.com'}
    assert client.post('/v1/users/upsert', json=body, headers=users['student']).status_code == 403
    assert client.post('/v1/users/upsert', json=body, headers=users['admin']).status_code == 200


def test_upsert_requires_email(client, users):
    resp = client.post('/v1/users/upsert', json={}, headers=users['student'])
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# /v1/leaderboard
# ---------------------------------------------------------------------------

def test_leaderboard_orders_by_points(client, db):
    db.put('users/a', {'name': 'Ann', 'totalPoints': 10})
    db.put('users/b', {'displayName': 'Bob', 'totalPoints': 30})
    db.put('users/c', {'name': 'Cy', 'totalPoints': 20})
    resp = client.get('/v1/leaderboard')
    assert resp.status_code == 200
    assert resp.get_json()['data'] == [
        {'uid': 'b', 'name': 'Bob', 'totalPoints': 30},
        {'uid': 'c', 'name': 'Cy', 'totalPoints': 20},
        {'uid': 'a', 'name': 'Ann', 'totalPoints': 10},
    ]


@pytest.mark.parametrize('body', [
    {'email': 123, 'password': 'secret1'},
    {'email': 'x@example.com', 'password': 123456},
    {'email': ['x@example.com'], 'password': 'secret1'},
])
def test_register_rejects_non_string_credentials(client, fake_auth, body):
    resp = client.post('/v1/auth/register', json=body)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == {'code': 'BAD_REQUEST', 'message': 'email and password are required'}
    assert fake_auth.users == {}


def test_assign_role_rejects_non_string_uid(client, fake_auth, users):
    resp = client.post('/v1/auth/assign-role', json={'uid': 7, 'role': 'admin'}, headers=users['admin'])
    assert resp.status_code == 400
    assert 7 not in fake_auth.claims


@pytest.mark.parametrize('body', [
    {'uid': 5, 'email': 'x@example.com'},
    {'email': 42},
])
def test_upsert_rejects_non_string_fields(client, users, body):
    resp = client.post('/v1/users/upsert', json=body, headers=users['admin'])
    assert resp.status_code == 400
