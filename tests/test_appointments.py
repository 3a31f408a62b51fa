from datetime import datetime, timedelta

import pytest

from aloa.extensions import db
from aloa.models.alert_models import Alert
from aloa.models.appointment_models import Appointment
from aloa.services import appointment_service
from aloa.utils.errors import SlotUnavailable


def test_patient_books_appointment(book, patient, doctor, future_day):
    response = book(patient, doctor)

    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'Appointment booked successfully'
    appointment = body['data']['appointment']
    assert appointment['status'] == 'scheduled'
    assert appointment['patient']['id'] == patient.id
    assert appointment['doctor']['id'] == doctor.id
    assert appointment['date'] == future_day.isoformat()


def test_booking_zero_pads_time(book, patient, doctor):
    response = book(patient, doctor, time='9:30')

    assert response.get_json()['data']['appointment']['time'] == '09:30'


def test_double_booking_is_rejected(book, make_user, doctor):
    first_patient = make_user('patient')
    second_patient = make_user('patient')
    assert book(first_patient, doctor).status_code == 201

    response = book(second_patient, doctor)

    assert response.status_code == 409
    assert response.get_json()['message'] == 'Doctor is not available at this time slot'
    assert Appointment.query.count() == 1


def test_rejected_booking_writes_no_reminder(book, make_user, doctor):
    first_patient = make_user('patient')
    second_patient = make_user('patient')
    book(first_patient, doctor)

    book(second_patient, doctor)

    assert Alert.query.filter_by(user_id=second_patient.id).count() == 0


def test_cancelled_slot_can_be_booked_again(client, book, make_user, doctor, auth_headers):
    first_patient = make_user('patient')
    second_patient = make_user('patient')
    appointment_id = book(first_patient, doctor).get_json()['data']['appointment']['id']

    client.delete(f'/api/appointments/{appointment_id}', headers=auth_headers(first_patient))

    assert book(second_patient, doctor).status_code == 201


def test_same_slot_with_another_doctor_is_allowed(book, patient, make_user):
    assert book(patient, make_user('doctor')).status_code == 201
    assert book(patient, make_user('doctor')).status_code == 201


def test_booking_creates_reminder_one_day_before(book, patient, doctor, future_day):
    appointment_id = book(patient, doctor, time='14:30').get_json()['data']['appointment']['id']

    alert = Alert.query.filter_by(user_id=patient.id).one()
    scheduled_at = datetime.combine(future_day, datetime.strptime('14:30', '%H:%M').time())
    assert alert.type == 'appointment'
    assert alert.title == 'Appointment Reminder'
    assert alert.priority == 'medium'
    assert alert.scheduled_for == scheduled_at - timedelta(hours=24)
    assert alert.expires_at == scheduled_at
    assert alert.related_model == 'Appointment'
    assert alert.related_id == appointment_id


def test_booking_succeeds_when_reminder_fails(book, patient, doctor, monkeypatch):
    def broken_reminder(appointment):
        raise RuntimeError('alert store unavailable')

    monkeypatch.setattr('aloa.services.alert_service.build_appointment_reminder', broken_reminder)

    response = book(patient, doctor)

    assert response.status_code == 201
    assert Appointment.query.count() == 1
    assert Alert.query.count() == 0


def test_booking_in_the_past_is_rejected(book, patient, doctor):
    response = book(patient, doctor, day=datetime.utcnow().date() - timedelta(days=1))

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Cannot book appointments in the past'


def test_booking_with_inactive_doctor_is_rejected(book, patient, make_user):
    inactive = make_user('doctor', is_active=False)

    response = book(patient, inactive)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Invalid or inactive doctor'


def test_booking_validation_lists_all_errors(client, patient, auth_headers):
    response = client.post('/api/appointments', json={'time': '25:00', 'type': 'Massage'},
                           headers=auth_headers(patient))

    assert response.status_code == 400
    fields = {e['field'] for e in response.get_json()['errors']}
    assert {'date', 'time', 'type'} <= fields
    assert Appointment.query.count() == 0


def test_doctor_books_for_patient(client, patient, doctor, auth_headers, future_day):
    response = client.post('/api/appointments', json={
        'patient': patient.id,
        'date': future_day.isoformat(),
        'time': '11:00',
        'type': 'Follow-up',
    }, headers=auth_headers(doctor))

    assert response.status_code == 201
    assert response.get_json()['data']['appointment']['doctor']['id'] == doctor.id


def test_listing_is_scoped_to_the_caller(client, book, make_user, doctor, auth_headers):
    own = make_user('patient')
    other = make_user('patient')
    book(own, doctor, time='09:00')
    book(other, doctor, time='09:30')

    patient_view = client.get('/api/appointments', headers=auth_headers(own)).get_json()['data']
    doctor_view = client.get('/api/appointments', headers=auth_headers(doctor)).get_json()['data']

    assert [a['patient']['id'] for a in patient_view['appointments']] == [own.id]
    assert patient_view['pagination']['total'] == 1
    assert doctor_view['pagination']['total'] == 2


def test_unrelated_user_cannot_read_appointment(client, book, patient, doctor, make_user, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']
    stranger = make_user('patient')

    response = client.get(f'/api/appointments/{appointment_id}', headers=auth_headers(stranger))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'Access denied'


def test_missing_appointment_is_not_found(client, patient, auth_headers):
    response = client.get('/api/appointments/999', headers=auth_headers(patient))

    assert response.status_code == 404


def test_doctor_completes_appointment_with_diagnosis(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={
        'status': 'completed', 'diagnosis': 'Seasonal allergy', 'treatment': 'Antihistamines',
    }, headers=auth_headers(doctor))

    assert response.status_code == 200
    appointment = response.get_json()['data']['appointment']
    assert appointment['status'] == 'completed'
    assert appointment['diagnosis'] == 'Seasonal allergy'


def test_patient_cannot_complete_appointment(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={'status': 'completed'},
                          headers=auth_headers(patient))

    assert response.status_code == 403
    assert db.session.get(Appointment, appointment_id).status == 'scheduled'


def test_patient_diagnosis_is_ignored(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={
        'notes': 'Bring previous results', 'diagnosis': 'Self diagnosed',
    }, headers=auth_headers(patient))

    appointment = response.get_json()['data']['appointment']
    assert appointment['notes'] == 'Bring previous results'
    assert appointment['diagnosis'] is None


def test_cancelled_appointment_cannot_be_reopened(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']
    client.delete(f'/api/appointments/{appointment_id}', headers=auth_headers(patient))

    response = client.put(f'/api/appointments/{appointment_id}', json={'status': 'scheduled'},
                          headers=auth_headers(doctor))

    assert response.status_code == 400
    assert db.session.get(Appointment, appointment_id).status == 'cancelled'


def test_reschedule_into_taken_slot_is_rejected(client, book, make_user, doctor, auth_headers):
    first = make_user('patient')
    second = make_user('patient')
    book(first, doctor, time='10:00')
    appointment_id = book(second, doctor, time='11:00').get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={'time': '10:00'},
                          headers=auth_headers(second))

    assert response.status_code == 409
    assert db.session.get(Appointment, appointment_id).time == '11:00'


def test_updating_notes_keeps_own_slot(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={'notes': 'Running late'},
                          headers=auth_headers(patient))

    assert response.status_code == 200


def test_availability_lists_free_and_booked_slots(client, book, patient, doctor, auth_headers, future_day):
    book(patient, doctor, time='10:00')

    response = client.get(f'/api/appointments/availability/{doctor.id}?date={future_day.isoformat()}',
                          headers=auth_headers(patient))

    data = response.get_json()['data']
    assert response.status_code == 200
    assert data['booked_slots'] == ['10:00']
    assert '10:00' not in data['available_slots']
    assert '09:00' in data['available_slots']
    assert data['doctor']['id'] == doctor.id


def test_availability_requires_date(client, patient, doctor, auth_headers):
    response = client.get(f'/api/appointments/availability/{doctor.id}', headers=auth_headers(patient))

    assert response.status_code == 400


def test_availability_for_unknown_doctor(client, patient, auth_headers, future_day):
    response = client.get(f'/api/appointments/availability/999?date={future_day.isoformat()}',
                          headers=auth_headers(patient))

    assert response.status_code == 404


def test_unique_index_catches_race_past_the_check(app, patient, doctor, future_day, monkeypatch):
    def _appointment():
        return Appointment(patient_id=patient.id, doctor_id=doctor.id, date=future_day,
                           time='10:00', type='Follow-up', status='scheduled')

    appointment_service.save_appointment(_appointment())
    # Simulate a concurrent request that checked before the first insert
    monkeypatch.setattr(appointment_service, 'find_conflicting_appointment', lambda *args, **kwargs: None)

    with pytest.raises(SlotUnavailable):
        appointment_service.save_appointment(_appointment())
    assert Appointment.query.count() == 1


def test_reschedule_moves_the_reminder(client, book, patient, doctor, auth_headers, future_day):
    appointment_id = book(patient, doctor, time='10:00').get_json()['data']['appointment']['id']
    new_day = future_day + timedelta(days=10)

    response = client.put(f'/api/appointments/{appointment_id}', json={'date': new_day.isoformat(), 'time': '15:00'},
                          headers=auth_headers(patient))

    assert response.status_code == 200
    alert = Alert.query.filter_by(related_model='Appointment', related_id=appointment_id).one()
    scheduled_at = datetime.combine(new_day, datetime.strptime('15:00', '%H:%M').time())
    assert alert.expires_at == scheduled_at
    assert alert.scheduled_for == scheduled_at - timedelta(hours=24)


def test_notes_update_keeps_the_reminder(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']
    reminder_id = Alert.query.filter_by(related_id=appointment_id).one().id

    client.put(f'/api/appointments/{appointment_id}', json={'notes': 'Fasting'}, headers=auth_headers(patient))

    assert Alert.query.filter_by(related_id=appointment_id).one().id == reminder_id


def test_cancelling_removes_the_reminder(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    client.delete(f'/api/appointments/{appointment_id}', headers=auth_headers(patient))

    alerts = client.get('/api/alerts', headers=auth_headers(patient)).get_json()['data']
    assert alerts['alerts'] == []
    assert alerts['unread_count'] == 0


def test_cancel_by_status_update_removes_the_reminder(client, book, patient, doctor, auth_headers):
    appointment_id = book(patient, doctor).get_json()['data']['appointment']['id']

    response = client.put(f'/api/appointments/{appointment_id}', json={'status': 'cancelled'},
                          headers=auth_headers(doctor))

    assert response.status_code == 200
    assert Alert.query.filter_by(related_id=appointment_id).count() == 0
