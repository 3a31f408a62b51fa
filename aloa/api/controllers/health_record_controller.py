# /aloa/api/controllers/health_record_controller.py
from flask import request
from aloa.models.health_record_models import HealthRecord, RECORD_TYPES
from aloa.schemas.health_record_schemas import HealthRecordCreateSchema, HealthRecordUpdateSchema
from aloa.services import health_record_service
from aloa.api.controllers import get_or_404
from aloa.utils.decorators import get_current_user
from aloa.utils.errors import NotFound
from aloa.utils.policies import authorize, scope_query
from aloa.utils.responses import success_response, pagination_meta
from aloa.utils.storage_util import record_storage
from aloa.utils.validation import validate_payload, get_pagination_args, get_date_arg


def _record_form_data():
    """Request fields from either a JSON body or a multipart form."""
    if request.is_json:
        return request.get_json(silent=True)

    data = {key: value for key, value in request.form.items() if value != ''}
    tags = request.form.getlist('tags')
    if len(tags) > 1:
        data['tags'] = tags
    return data


def get_health_records():
    user = get_current_user()
    page, limit = get_pagination_args()

    query = scope_query(user, 'health_records', HealthRecord.query, HealthRecord)

    record_type = request.args.get('type')
    if record_type in RECORD_TYPES:
        query = query.filter(HealthRecord.type == record_type)

    start_date = get_date_arg('start_date')
    if start_date:
        query = query.filter(HealthRecord.date >= start_date)
    end_date = get_date_arg('end_date')
    if end_date:
        query = query.filter(HealthRecord.date <= end_date)

    patient_id = request.args.get('patient', type=int)
    if patient_id and user.role != 'patient':
        query = query.filter(HealthRecord.patient_id == patient_id)

    page_obj = (query.order_by(HealthRecord.date.desc(), HealthRecord.id.desc())
                .paginate(page=page, per_page=limit, error_out=False))
    return success_response({
        'records': [record.to_dict() for record in page_obj.items],
        'pagination': pagination_meta(page_obj),
    })


def get_health_record(record_id):
    record = get_or_404(HealthRecord, record_id, 'Health record not found')
    authorize(get_current_user(), 'health_records', 'read', record)
    return success_response({'record': record.to_dict()})


def create_health_record():
    payload = validate_payload(HealthRecordCreateSchema, _record_form_data())
    files = [f for f in request.files.getlist('files') if f and f.filename]
    record = health_record_service.create_health_record(get_current_user(), payload, files)
    return success_response({'record': record.to_dict()},
                            message='Health record created successfully', status=201)


def update_health_record(record_id):
    record = get_or_404(HealthRecord, record_id, 'Health record not found')
    authorize(get_current_user(), 'health_records', 'update', record)

    payload = validate_payload(HealthRecordUpdateSchema, _record_form_data())
    health_record_service.update_health_record(record, payload)
    return success_response({'record': record.to_dict()}, message='Health record updated successfully')


def delete_health_record(record_id):
    record = get_or_404(HealthRecord, record_id, 'Health record not found')
    authorize(get_current_user(), 'health_records', 'delete', record)

    health_record_service.delete_health_record(record)
    return success_response(message='Health record deleted successfully')


def download_health_record_file(record_id, file_index):
    record = get_or_404(HealthRecord, record_id, 'Health record not found')
    authorize(get_current_user(), 'health_records', 'download', record)

    descriptor = record.get_file(file_index)
    if descriptor is None:
        raise NotFound('File not found')
    return record_storage.send(descriptor)
