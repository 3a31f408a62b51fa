from aloa.extensions import db
from aloa.models.system_models import AuditLog
from aloa.models.user_models import User, MAX_FAILED_LOGINS
from tests.conftest import PASSWORD


def _register(client, **overrides):
    payload = {'name': 'Ada Patient', 'email': 'ada@example.com', 'password': 'Secret123'}
    payload.update(overrides)
    return client.post('/api/auth/register', json=payload)


def test_register_patient_returns_user_and_tokens(client):
    response = _register(client)

    assert response.status_code == 201
    body = response.get_json()
    assert body['success'] is True
    assert body['data']['user']['role'] == 'patient'
    assert body['data']['access_token']
    assert User.find_by_email('ADA@example.com') is not None


def test_register_rejects_duplicate_email(client):
    _register(client)
    response = _register(client, email='Ada@Example.com')

    assert response.status_code == 409
    assert response.get_json()['success'] is False


def test_register_doctor_requires_specialization(client):
    response = _register(client, role='doctor')

    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert any('Specialization' in e['message'] for e in errors)


def test_register_cannot_create_admin(client):
    response = _register(client, role='admin')

    assert response.status_code == 400
    assert User.query.count() == 0


def test_register_reports_every_invalid_field(client):
    response = client.post('/api/auth/register', json={'email': 'not-an-email', 'password': ''})

    assert response.status_code == 400
    fields = {e['field'] for e in response.get_json()['errors']}
    assert {'name', 'email', 'password'} <= fields


def test_register_enforces_password_policy(client):
    response = _register(client, password='lettersonly')

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'password'
    assert User.query.count() == 0


def test_login_success(client, patient):
    response = client.post('/api/auth/login', json={'email': patient.email, 'password': PASSWORD})

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['user']['id'] == patient.id
    assert data['access_token'] and data['refresh_token']


def test_login_wrong_password(client, patient):
    response = client.post('/api/auth/login', json={'email': patient.email, 'password': 'Wrong1234'})

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid credentials'


def test_login_locks_account_after_repeated_failures(client, patient):
    for _ in range(MAX_FAILED_LOGINS):
        client.post('/api/auth/login', json={'email': patient.email, 'password': 'Wrong1234'})

    response = client.post('/api/auth/login', json={'email': patient.email, 'password': PASSWORD})
    assert response.status_code == 423


def test_login_deactivated_account(client, patient):
    patient.is_active = False
    db.session.commit()

    response = client.post('/api/auth/login', json={'email': patient.email, 'password': PASSWORD})
    assert response.status_code == 403


def test_me_requires_token(client):
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.get_json()['success'] is False


def test_me_returns_current_user(client, patient, auth_headers):
    response = client.get('/api/auth/me', headers=auth_headers(patient))

    assert response.status_code == 200
    assert response.get_json()['data']['user']['email'] == patient.email


def test_logout_revokes_token(client, patient, auth_headers):
    headers = auth_headers(patient)
    assert client.post('/api/auth/logout', headers=headers).status_code == 200

    response = client.get('/api/auth/me', headers=headers)
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Token has been revoked'


def test_refresh_issues_new_access_token(client, patient):
    login = client.post('/api/auth/login', json={'email': patient.email, 'password': PASSWORD})
    refresh_token = login.get_json()['data']['refresh_token']

    response = client.post('/api/auth/refresh', headers={'Authorization': f'Bearer {refresh_token}'})
    assert response.status_code == 200
    assert response.get_json()['data']['access_token']


def test_protected_calls_are_audited(client, patient, auth_headers):
    client.get('/api/auth/me', headers=auth_headers(patient))

    entry = AuditLog.query.filter_by(action='VIEW_OWN_PROFILE').one()
    assert entry.user_id == patient.id
    assert entry.success is True


def test_doctors_list_shows_active_doctors_only(client, make_user, patient, auth_headers):
    make_user('doctor', name='Dr. Active', specialization='Neurology')
    make_user('doctor', name='Dr. Inactive', is_active=False)

    response = client.get('/api/doctors', headers=auth_headers(patient))

    names = [d['name'] for d in response.get_json()['data']['doctors']]
    assert names == ['Dr. Active']


def test_admin_user_management(client, admin, patient, auth_headers):
    listing = client.get('/api/admin/users?role=patient', headers=auth_headers(admin))
    assert listing.status_code == 200
    assert [u['id'] for u in listing.get_json()['data']['users']] == [patient.id]

    response = client.put(f'/api/admin/users/{patient.id}/status', json={'is_active': False},
                          headers=auth_headers(admin))
    assert response.status_code == 200
    assert db.session.get(User, patient.id).is_active is False


def test_admin_cannot_deactivate_self(client, admin, auth_headers):
    response = client.put(f'/api/admin/users/{admin.id}/status', json={'is_active': False},
                          headers=auth_headers(admin))
    assert response.status_code == 400


def test_user_admin_is_forbidden_for_patients(client, patient, auth_headers):
    response = client.get('/api/admin/users', headers=auth_headers(patient))
    assert response.status_code == 403


def test_deactivated_user_token_is_refused(client, patient, auth_headers):
    headers = auth_headers(patient)
    patient.is_active = False
    db.session.commit()

    response = client.get('/api/appointments', headers=headers)
    assert response.status_code == 403
