# /aloa/services/prescription_service.py
from datetime import datetime, timedelta
from flask import current_app
from sqlalchemy import func

from aloa.extensions import db
from aloa.models.appointment_models import Appointment
from aloa.models.prescription_models import Prescription, PRESCRIPTION_TRANSITIONS
from aloa.models.user_models import User
from aloa.services import check_transition
from aloa.utils.errors import DomainConflict, ValidationFailed


def add_one_year(moment):
    """Same calendar day one year later; Feb 29 falls back to Feb 28."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)


def apply_prescription_defaults(prescription, now=None):
    if prescription.expiry_date is None:
        prescription.expiry_date = add_one_year(now or datetime.utcnow())
    return prescription


def issue_prescription(actor, payload):
    """Creates an active prescription written by the calling doctor (or on a doctor's behalf by an admin)."""
    if actor.role == 'doctor':
        doctor = actor
    else:
        if payload.doctor is None:
            raise ValidationFailed(errors=[{'field': 'doctor', 'message': 'Valid doctor ID is required'}])
        doctor = User.find_active(payload.doctor, 'doctor')
        if not doctor:
            raise DomainConflict('Invalid or inactive doctor')

    patient = User.find_active(payload.patient, 'patient')
    if not patient:
        raise DomainConflict('Invalid or inactive patient')

    if payload.appointment is not None:
        appointment = db.session.get(Appointment, payload.appointment)
        if not appointment or appointment.patient_id != patient.id:
            raise DomainConflict('Appointment does not belong to this patient')

    prescription = Prescription(
        patient_id=patient.id,
        doctor_id=doctor.id,
        appointment_id=payload.appointment,
        medications=[m.model_dump() for m in payload.medications],
        diagnosis=payload.diagnosis,
        notes=payload.notes,
        status='active',
        refills_allowed=payload.refills_allowed,
        refills_used=0,
        expiry_date=payload.expiry_date,
        is_urgent=payload.is_urgent,
    )
    apply_prescription_defaults(prescription)
    db.session.add(prescription)
    db.session.commit()
    current_app.logger.info(f"Prescription {prescription.id} issued by doctor {doctor.id} for patient {patient.id}")
    return prescription


def update_prescription(prescription, payload):
    fields = payload.model_fields_set

    if 'status' in fields and payload.status is not None:
        if check_transition('prescription', PRESCRIPTION_TRANSITIONS, prescription.status, payload.status):
            prescription.status = payload.status
    if 'notes' in fields:
        prescription.notes = payload.notes
    if 'refills_allowed' in fields and payload.refills_allowed is not None:
        if payload.refills_allowed < prescription.refills_used:
            raise DomainConflict('Refills allowed cannot be lower than refills already used')
        prescription.refills_allowed = payload.refills_allowed

    db.session.commit()
    return prescription


def cancel_prescription(prescription):
    if check_transition('prescription', PRESCRIPTION_TRANSITIONS, prescription.status, 'cancelled'):
        prescription.status = 'cancelled'
        db.session.commit()
    return prescription


def request_refill(prescription):
    """Consumes one refill.

    The increment is a conditional UPDATE so concurrent requests can never
    push refills_used past refills_allowed.
    """
    if prescription.status != 'active':
        raise DomainConflict('Prescription is not active')
    if prescription.is_expired:
        raise DomainConflict('Prescription has expired')
    if prescription.refills_remaining <= 0:
        raise DomainConflict('No refills remaining')

    now = datetime.utcnow()
    updated = Prescription.query.filter(
        Prescription.id == prescription.id,
        Prescription.status == 'active',
        Prescription.refills_used < Prescription.refills_allowed,
        db.or_(Prescription.expiry_date.is_(None), Prescription.expiry_date >= now),
    ).update({Prescription.refills_used: Prescription.refills_used + 1}, synchronize_session=False)

    if not updated:
        db.session.rollback()
        raise DomainConflict('No refills remaining')

    db.session.commit()
    db.session.refresh(prescription)
    current_app.logger.info(
        f"Refill processed for prescription {prescription.id}: {prescription.refills_used}/{prescription.refills_allowed}"
    )
    return prescription


def prescription_stats(user):
    query = Prescription.query
    if user.role == 'doctor':
        query = query.filter(Prescription.doctor_id == user.id)

    now = datetime.utcnow()
    by_status = (query.with_entities(Prescription.status, func.count(Prescription.id))
                 .group_by(Prescription.status).all())
    return {
        'total_prescriptions': query.count(),
        'urgent_prescriptions': query.filter(Prescription.is_urgent.is_(True),
                                             Prescription.status == 'active').count(),
        'expiring_soon': query.filter(
            Prescription.status == 'active',
            Prescription.expiry_date >= now,
            Prescription.expiry_date <= now + timedelta(days=30),
        ).count(),
        'status_breakdown': {status: count for status, count in by_status},
    }
