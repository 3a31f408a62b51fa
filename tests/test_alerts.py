from datetime import datetime, timedelta

from aloa.extensions import db
from aloa.models.alert_models import Alert
from aloa.services import alert_service


def _alert(user, **fields):
    data = {'type': 'system', 'title': 'Notice', 'message': 'Something happened', 'priority': 'medium'}
    data.update(fields)
    alert = Alert(user_id=user.id, **data)
    db.session.add(alert)
    db.session.commit()
    return alert


def test_list_returns_own_unexpired_alerts(client, patient, make_user, auth_headers):
    _alert(patient, title='Current')
    _alert(patient, title='Expired', expires_at=datetime.utcnow() - timedelta(hours=1))
    _alert(make_user('patient'), title='Someone else')

    response = client.get('/api/alerts', headers=auth_headers(patient))

    data = response.get_json()['data']
    assert [a['title'] for a in data['alerts']] == ['Current']
    assert data['unread_count'] == 1


def test_list_filters_by_read_state_and_priority(client, patient, auth_headers):
    _alert(patient, title='Urgent', priority='urgent')
    _alert(patient, title='Read', is_read=True)

    unread = client.get('/api/alerts?is_read=false', headers=auth_headers(patient)).get_json()['data']
    urgent = client.get('/api/alerts?priority=urgent', headers=auth_headers(patient)).get_json()['data']

    assert [a['title'] for a in unread['alerts']] == ['Urgent']
    assert [a['title'] for a in urgent['alerts']] == ['Urgent']


def test_mark_read_sets_read_at_once(client, patient, auth_headers):
    alert = _alert(patient)

    first = client.put(f'/api/alerts/{alert.id}/read', headers=auth_headers(patient))
    first_read_at = first.get_json()['data']['alert']['read_at']
    second = client.put(f'/api/alerts/{alert.id}/read', headers=auth_headers(patient))

    assert first.status_code == 200
    assert first_read_at is not None
    assert second.get_json()['data']['alert']['read_at'] == first_read_at


def test_mark_read_keeps_existing_timestamp(app, patient):
    earlier = datetime.utcnow() - timedelta(days=2)
    alert = _alert(patient, is_read=True, read_at=earlier)

    alert_service.mark_alert_read(alert)

    assert alert.read_at == earlier


def test_cannot_read_someone_elses_alert(client, patient, make_user, auth_headers):
    alert = _alert(make_user('patient'))

    assert client.get(f'/api/alerts/{alert.id}', headers=auth_headers(patient)).status_code == 403
    assert client.put(f'/api/alerts/{alert.id}/read', headers=auth_headers(patient)).status_code == 403


def test_mark_all_read(client, patient, make_user, auth_headers):
    _alert(patient)
    _alert(patient)
    other = _alert(make_user('patient'))

    response = client.put('/api/alerts/read-all', headers=auth_headers(patient))

    assert response.get_json()['data']['updated'] == 2
    assert alert_service.unread_count(patient.id) == 0
    assert db.session.get(Alert, other.id).is_read is False


def test_admin_creates_alert(client, admin, patient, auth_headers):
    response = client.post('/api/alerts', json={
        'user': patient.id,
        'type': 'lab_results',
        'title': 'Lab Results Available',
        'message': 'Your recent blood work results are ready.',
        'priority': 'high',
        'metadata': {'lab': 'central'},
    }, headers=auth_headers(admin))

    assert response.status_code == 201
    alert = response.get_json()['data']['alert']
    assert alert['user_id'] == patient.id
    assert alert['metadata'] == {'lab': 'central'}


def test_alert_creation_validates_related_reference(client, admin, patient, auth_headers):
    response = client.post('/api/alerts', json={
        'user': patient.id, 'type': 'system', 'title': 'x', 'message': 'y', 'related_model': 'Appointment',
    }, headers=auth_headers(admin))

    assert response.status_code == 400
    assert Alert.query.count() == 0


def test_patients_cannot_create_alerts(client, patient, auth_headers):
    response = client.post('/api/alerts', json={
        'user': patient.id, 'type': 'system', 'title': 'x', 'message': 'y',
    }, headers=auth_headers(patient))

    assert response.status_code == 403


def test_owner_and_admin_can_delete(client, patient, admin, make_user, auth_headers):
    own = _alert(patient)
    foreign = _alert(make_user('patient'))

    assert client.delete(f'/api/alerts/{foreign.id}', headers=auth_headers(patient)).status_code == 403
    assert client.delete(f'/api/alerts/{own.id}', headers=auth_headers(patient)).status_code == 200
    assert client.delete(f'/api/alerts/{foreign.id}', headers=auth_headers(admin)).status_code == 200
    assert Alert.query.count() == 0


def test_alert_stats_for_admin(client, admin, patient, auth_headers):
    _alert(patient, priority='urgent')
    _alert(patient, type='medication', is_read=True)

    response = client.get('/api/alerts/stats/summary', headers=auth_headers(admin))

    data = response.get_json()['data']
    assert data['total_alerts'] == 2
    assert data['unread_alerts'] == 1
    assert data['urgent_alerts'] == 1
    assert data['type_breakdown'] == {'system': 1, 'medication': 1}


def test_alert_stats_forbidden_for_doctor(client, doctor, auth_headers):
    assert client.get('/api/alerts/stats/summary', headers=auth_headers(doctor)).status_code == 403
