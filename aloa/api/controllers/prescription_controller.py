# /aloa/api/controllers/prescription_controller.py
from flask import request
from aloa.models.prescription_models import Prescription, PRESCRIPTION_STATUSES
from aloa.schemas.prescription_schemas import PrescriptionCreateSchema, PrescriptionUpdateSchema
from aloa.services import prescription_service
from aloa.api.controllers import get_or_404
from aloa.utils.decorators import get_current_user
from aloa.utils.policies import authorize, scope_query
from aloa.utils.responses import success_response, pagination_meta
from aloa.utils.validation import validate_payload, get_json_body, get_pagination_args


def get_prescriptions():
    user = get_current_user()
    page, limit = get_pagination_args()

    query = scope_query(user, 'prescriptions', Prescription.query, Prescription)

    status = request.args.get('status')
    if status in PRESCRIPTION_STATUSES:
        query = query.filter(Prescription.status == status)

    patient_id = request.args.get('patient', type=int)
    if patient_id and user.role != 'patient':
        query = query.filter(Prescription.patient_id == patient_id)

    page_obj = (query.order_by(Prescription.created_at.desc(), Prescription.id.desc())
                .paginate(page=page, per_page=limit, error_out=False))
    return success_response({
        'prescriptions': [p.to_dict() for p in page_obj.items],
        'pagination': pagination_meta(page_obj),
    })


def get_prescription(prescription_id):
    prescription = get_or_404(Prescription, prescription_id, 'Prescription not found')
    authorize(get_current_user(), 'prescriptions', 'read', prescription)
    return success_response({'prescription': prescription.to_dict()})


def create_prescription():
    payload = validate_payload(PrescriptionCreateSchema, get_json_body())
    prescription = prescription_service.issue_prescription(get_current_user(), payload)
    return success_response({'prescription': prescription.to_dict()},
                            message='Prescription created successfully', status=201)


def update_prescription(prescription_id):
    prescription = get_or_404(Prescription, prescription_id, 'Prescription not found')
    authorize(get_current_user(), 'prescriptions', 'update', prescription)

    payload = validate_payload(PrescriptionUpdateSchema, get_json_body())
    prescription_service.update_prescription(prescription, payload)
    return success_response({'prescription': prescription.to_dict()}, message='Prescription updated successfully')


def refill_prescription(prescription_id):
    prescription = get_or_404(Prescription, prescription_id, 'Prescription not found')
    authorize(get_current_user(), 'prescriptions', 'refill', prescription)

    prescription_service.request_refill(prescription)
    return success_response({
        'prescription': prescription.to_dict(),
        'refills_remaining': prescription.refills_remaining,
    }, message='Prescription refill processed successfully')


def cancel_prescription(prescription_id):
    prescription = get_or_404(Prescription, prescription_id, 'Prescription not found')
    authorize(get_current_user(), 'prescriptions', 'cancel', prescription)

    prescription_service.cancel_prescription(prescription)
    return success_response(message='Prescription cancelled successfully')


def get_prescription_stats():
    return success_response(prescription_service.prescription_stats(get_current_user()))
