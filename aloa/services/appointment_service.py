# /aloa/services/appointment_service.py
from datetime import datetime
from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError

from aloa.extensions import db
from aloa.models.appointment_models import Appointment, APPOINTMENT_TRANSITIONS
from aloa.models.user_models import User
from aloa.services import check_transition
from aloa.services.alert_service import (
    create_appointment_reminder, dismiss_appointment_reminder, replace_appointment_reminder
)
from aloa.utils.errors import AccessDenied, DomainConflict, SlotUnavailable, ValidationFailed

SLOT_FIELDS = ('doctor_id', 'date', 'time')
STAFF_ONLY_STATUSES = ('completed', 'no-show')


def find_conflicting_appointment(doctor_id, day, time, exclude_id=None):
    """Returns another scheduled appointment holding this doctor's slot, if any."""
    query = Appointment.query.filter_by(doctor_id=doctor_id, date=day, time=time, status='scheduled')
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    # Do not flush the candidate row before it has been checked.
    with db.session.no_autoflush:
        return query.first()


def slot_changed(appointment):
    """True for a new appointment or one whose doctor, date or time was modified."""
    state = inspect(appointment)
    if state.transient or state.pending:
        return True
    return any(state.attrs[field].history.has_changes() for field in SLOT_FIELDS)


def ensure_slot_available(appointment):
    """Rejects the write when the doctor already has a scheduled appointment in the slot."""
    if appointment.status != 'scheduled' or not slot_changed(appointment):
        return
    if find_conflicting_appointment(appointment.doctor_id, appointment.date, appointment.time,
                                    exclude_id=appointment.id):
        raise SlotUnavailable()


def save_appointment(appointment):
    """Runs the slot check and commits.

    The partial unique index catches a concurrent booking that slipped
    past the check; it is reported the same way.
    """
    ensure_slot_available(appointment)
    db.session.add(appointment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(
            f"Double booking rejected by index for doctor {appointment.doctor_id} "
            f"on {appointment.date} at {appointment.time}"
        )
        raise SlotUnavailable()
    return appointment


def _ensure_not_in_past(day):
    # Same clock as the reminder times
    if day < datetime.utcnow().date():
        raise DomainConflict('Cannot book appointments in the past')


def _resolve_participants(actor, payload):
    """Works out (patient, doctor) for a booking from the caller's role."""
    if actor.role == 'patient':
        patient_id, doctor_id = actor.id, payload.doctor
    elif actor.role == 'doctor':
        patient_id, doctor_id = payload.patient, actor.id
    else:
        patient_id, doctor_id = payload.patient, payload.doctor

    errors = []
    if doctor_id is None:
        errors.append({'field': 'doctor', 'message': 'Valid doctor ID is required'})
    if patient_id is None:
        errors.append({'field': 'patient', 'message': 'Valid patient ID is required'})
    if errors:
        raise ValidationFailed(errors=errors)

    doctor = User.find_active(doctor_id, 'doctor')
    if not doctor:
        raise DomainConflict('Invalid or inactive doctor')
    patient = User.find_active(patient_id, 'patient')
    if not patient:
        raise DomainConflict('Invalid or inactive patient')
    return patient, doctor


def book_appointment(actor, payload):
    """Creates a scheduled appointment, then its reminder alert."""
    patient, doctor = _resolve_participants(actor, payload)
    _ensure_not_in_past(payload.date)

    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        date=payload.date,
        time=payload.time,
        type=payload.type,
        status='scheduled',
        notes=payload.notes,
        symptoms=payload.symptoms,
    )
    save_appointment(appointment)
    current_app.logger.info(
        f"Appointment {appointment.id} booked: doctor {doctor.id}, patient {patient.id}, "
        f"{appointment.date} {appointment.time}"
    )

    create_appointment_reminder(appointment)
    return appointment


def change_status(appointment, new_status, actor):
    if new_status in STAFF_ONLY_STATUSES and actor.role == 'patient':
        raise AccessDenied(f'Patients cannot mark appointments as {new_status}')
    if check_transition('appointment', APPOINTMENT_TRANSITIONS, appointment.status, new_status):
        appointment.status = new_status
        return True
    return False


def update_appointment(appointment, actor, payload):
    """Applies a partial update, honouring role limits and the status graph."""
    fields = payload.model_fields_set

    cancelled = False
    if 'status' in fields and payload.status is not None:
        cancelled = change_status(appointment, payload.status, actor) and payload.status == 'cancelled'

    if 'notes' in fields:
        appointment.notes = payload.notes
    if 'symptoms' in fields:
        appointment.symptoms = payload.symptoms

    # Only doctors and admins record clinical outcomes
    if actor.role in ('doctor', 'admin'):
        if 'diagnosis' in fields:
            appointment.diagnosis = payload.diagnosis
        if 'treatment' in fields:
            appointment.treatment = payload.treatment

    reschedule = {f: getattr(payload, f) for f in ('date', 'time', 'doctor')
                  if f in fields and getattr(payload, f) is not None}
    moved = False
    if reschedule:
        _reschedule(appointment, actor, reschedule)
        moved = slot_changed(appointment)

    save_appointment(appointment)

    if cancelled:
        dismiss_appointment_reminder(appointment)
    elif moved:
        replace_appointment_reminder(appointment)
    return appointment


def _reschedule(appointment, actor, changes):
    if appointment.status != 'scheduled':
        raise DomainConflict(f'Cannot reschedule a {appointment.status} appointment')

    if 'doctor' in changes and changes['doctor'] != appointment.doctor_id:
        if actor.role == 'doctor':
            raise AccessDenied('Doctors cannot reassign appointments')
        if not User.find_active(changes['doctor'], 'doctor'):
            raise DomainConflict('Invalid or inactive doctor')
        appointment.doctor_id = changes['doctor']

    if 'date' in changes:
        _ensure_not_in_past(changes['date'])
        appointment.date = changes['date']
    if 'time' in changes:
        appointment.time = changes['time']


def cancel_appointment(appointment, actor):
    if change_status(appointment, 'cancelled', actor):
        db.session.commit()
        dismiss_appointment_reminder(appointment)
    return appointment


def get_availability(doctor, day):
    """Splits the configured slot set into booked and available times for a day."""
    booked = [
        row.time for row in
        Appointment.query.with_entities(Appointment.time)
        .filter_by(doctor_id=doctor.id, date=day, status='scheduled')
        .order_by(Appointment.time)
        .all()
    ]
    all_slots = current_app.config['APPOINTMENT_SLOTS']
    return {
        'date': day.isoformat(),
        'doctor': {'id': doctor.id, 'name': doctor.name, 'specialization': doctor.specialization},
        'available_slots': [slot for slot in all_slots if slot not in booked],
        'booked_slots': booked,
    }
