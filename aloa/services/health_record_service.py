# /aloa/services/health_record_service.py
from flask import current_app

from aloa.extensions import db
from aloa.models.health_record_models import HealthRecord
from aloa.models.user_models import User
from aloa.utils.errors import DomainConflict, ValidationFailed
from aloa.utils.storage_util import record_storage


def _resolve_patient(actor, payload):
    if actor.role == 'patient':
        return actor
    if payload.patient is None:
        raise ValidationFailed(errors=[{'field': 'patient', 'message': 'Valid patient ID is required'}])
    patient = User.find_active(payload.patient, 'patient')
    if not patient:
        raise DomainConflict('Invalid or inactive patient')
    return patient


def _check_files(files):
    limit = current_app.config['MAX_FILES_PER_RECORD']
    if len(files) > limit:
        raise ValidationFailed(errors=[{'field': 'files', 'message': f'At most {limit} files may be attached'}])
    for file in files:
        record_storage.validate(file)


def create_health_record(actor, payload, files):
    """Stores the attachments and inserts the record.

    Every file stored by this call is removed again if anything after it fails.
    """
    patient = _resolve_patient(actor, payload)
    _check_files(files)

    stored = []
    try:
        for file in files:
            stored.append(record_storage.save(file, patient.id))

        record = HealthRecord(
            patient_id=patient.id,
            doctor_id=actor.id if actor.role == 'doctor' else None,
            type=payload.type,
            title=payload.title,
            date=payload.date,
            files=stored,
            tags=payload.tags,
            is_private=payload.is_private,
            lab_values=[row.model_dump() for row in payload.lab_values],
        )
        record.set_description(payload.description)
        db.session.add(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        record_storage.delete_quietly(stored)
        raise

    current_app.logger.info(f"Health record {record.id} created for patient {patient.id} with {len(stored)} file(s)")
    return record


def update_health_record(record, payload):
    fields = payload.model_fields_set

    if 'title' in fields and payload.title is not None:
        record.title = payload.title
    if 'description' in fields and payload.description is not None:
        record.set_description(payload.description)
    if 'tags' in fields and payload.tags is not None:
        record.tags = payload.tags
    if 'is_private' in fields and payload.is_private is not None:
        record.is_private = payload.is_private
    if 'lab_values' in fields and payload.lab_values is not None:
        record.lab_values = [row.model_dump() for row in payload.lab_values]

    db.session.commit()
    return record


def delete_health_record(record):
    files = list(record.files or [])
    db.session.delete(record)
    db.session.commit()
    record_storage.delete_quietly(files)
