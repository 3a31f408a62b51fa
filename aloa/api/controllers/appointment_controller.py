# /aloa/api/controllers/appointment_controller.py
from flask import request
from aloa.models.appointment_models import Appointment, APPOINTMENT_STATUSES
from aloa.models.user_models import User
from aloa.schemas.appointment_schemas import AppointmentCreateSchema, AppointmentUpdateSchema
from aloa.services import appointment_service
from aloa.api.controllers import get_or_404
from aloa.utils.decorators import get_current_user
from aloa.utils.errors import NotFound
from aloa.utils.policies import authorize, scope_query
from aloa.utils.responses import success_response, pagination_meta
from aloa.utils.validation import validate_payload, get_json_body, get_pagination_args, get_date_arg


def get_appointments():
    """Lists the caller's appointments with optional status/date/doctor/patient filters."""
    user = get_current_user()
    page, limit = get_pagination_args()

    query = scope_query(user, 'appointments', Appointment.query, Appointment)

    status = request.args.get('status')
    if status in APPOINTMENT_STATUSES:
        query = query.filter(Appointment.status == status)

    day = get_date_arg('date')
    if day:
        query = query.filter(Appointment.date == day)

    doctor_id = request.args.get('doctor', type=int)
    if doctor_id and user.role != 'doctor':
        query = query.filter(Appointment.doctor_id == doctor_id)

    patient_id = request.args.get('patient', type=int)
    if patient_id and user.role == 'admin':
        query = query.filter(Appointment.patient_id == patient_id)

    page_obj = (query.order_by(Appointment.date.desc(), Appointment.time.desc())
                .paginate(page=page, per_page=limit, error_out=False))
    return success_response({
        'appointments': [appt.to_dict() for appt in page_obj.items],
        'pagination': pagination_meta(page_obj),
    })


def get_appointment_by_id(appointment_id):
    appointment = get_or_404(Appointment, appointment_id, 'Appointment not found')
    authorize(get_current_user(), 'appointments', 'read', appointment)
    return success_response({'appointment': appointment.to_dict()})


def create_appointment():
    payload = validate_payload(AppointmentCreateSchema, get_json_body())
    appointment = appointment_service.book_appointment(get_current_user(), payload)
    return success_response({'appointment': appointment.to_dict()},
                            message='Appointment booked successfully', status=201)


def update_appointment(appointment_id):
    user = get_current_user()
    appointment = get_or_404(Appointment, appointment_id, 'Appointment not found')
    authorize(user, 'appointments', 'update', appointment)

    payload = validate_payload(AppointmentUpdateSchema, get_json_body())
    appointment_service.update_appointment(appointment, user, payload)
    return success_response({'appointment': appointment.to_dict()}, message='Appointment updated successfully')


def cancel_appointment(appointment_id):
    """Cancels rather than deletes, so the history is kept."""
    user = get_current_user()
    appointment = get_or_404(Appointment, appointment_id, 'Appointment not found')
    authorize(user, 'appointments', 'cancel', appointment)

    appointment_service.cancel_appointment(appointment, user)
    return success_response(message='Appointment cancelled successfully')


def get_doctor_availability(doctor_id):
    day = get_date_arg('date', required=True)
    doctor = User.find_active(doctor_id, 'doctor')
    if not doctor:
        raise NotFound('Doctor not found')
    return success_response(appointment_service.get_availability(doctor, day))
