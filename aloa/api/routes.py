# /aloa/api/routes.py

from flask_jwt_extended import jwt_required
from . import api_bp
from aloa.extensions import limiter
from aloa.utils.decorators import audit_log, require_permission
from .controllers import (
    auth_controller, user_controller, appointment_controller,
    health_record_controller, prescription_controller, alert_controller
)


# --- Authentication Endpoints ---
@api_bp.route('/auth/register', methods=['POST'])
@limiter.limit("5 per hour")
@audit_log("USER_REGISTRATION", "users")
def register():
    return auth_controller.register_user()

@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
@audit_log("USER_LOGIN", "authentication")
def login():
    return auth_controller.login_user()

@api_bp.route('/auth/logout', methods=['POST'])
@jwt_required()
@audit_log("USER_LOGOUT", "authentication")
def logout():
    return auth_controller.logout_user()

@api_bp.route('/auth/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    return auth_controller.refresh_token()

@api_bp.route('/auth/me', methods=['GET'])
@jwt_required()
@audit_log("VIEW_OWN_PROFILE", "users")
def get_me():
    return auth_controller.get_me()


# --- User Endpoints ---
@api_bp.route('/doctors', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_DOCTORS", "doctors")
@require_permission('doctors', 'read')
def get_doctors():
    return user_controller.get_active_doctors()

@api_bp.route('/admin/users', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALL_USERS", "users")
@require_permission('users', 'admin')
def get_users():
    return user_controller.get_all_users()

@api_bp.route('/admin/users/<int:user_id>/status', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_USER_STATUS", "users")
@require_permission('users', 'admin')
def set_user_status(user_id):
    return user_controller.set_user_status(user_id)


# --- Appointment Endpoints ---
@api_bp.route('/appointments', methods=['GET'])
@jwt_required()
@audit_log("VIEW_APPOINTMENTS", "appointments")
@require_permission('appointments', 'read')
def get_appointments():
    return appointment_controller.get_appointments()

@api_bp.route('/appointments/availability/<int:doctor_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_DOCTOR_AVAILABILITY", "appointments")
@require_permission('appointments', 'read')
def get_doctor_availability(doctor_id):
    return appointment_controller.get_doctor_availability(doctor_id)

@api_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_APPOINTMENT", "appointments")
@require_permission('appointments', 'read')
def get_appointment(appointment_id):
    return appointment_controller.get_appointment_by_id(appointment_id)

@api_bp.route('/appointments', methods=['POST'])
@jwt_required()
@audit_log("CREATE_APPOINTMENT", "appointments")
@require_permission('appointments', 'write')
def create_appointment():
    return appointment_controller.create_appointment()

@api_bp.route('/appointments/<int:appointment_id>', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_APPOINTMENT", "appointments")
@require_permission('appointments', 'write')
def update_appointment(appointment_id):
    return appointment_controller.update_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>', methods=['DELETE'])
@jwt_required()
@audit_log("CANCEL_APPOINTMENT", "appointments")
@require_permission('appointments', 'write')
def cancel_appointment(appointment_id):
    return appointment_controller.cancel_appointment(appointment_id)


# --- Health Record Endpoints ---
@api_bp.route('/health-records', methods=['GET'])
@jwt_required()
@audit_log("VIEW_HEALTH_RECORDS", "health_records")
@require_permission('health_records', 'read')
def get_health_records():
    return health_record_controller.get_health_records()

@api_bp.route('/health-records/<int:record_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_HEALTH_RECORD", "health_records")
@require_permission('health_records', 'read')
def get_health_record(record_id):
    return health_record_controller.get_health_record(record_id)

@api_bp.route('/health-records', methods=['POST'])
@jwt_required()
@audit_log("CREATE_HEALTH_RECORD", "health_records")
@require_permission('health_records', 'write')
def create_health_record():
    return health_record_controller.create_health_record()

@api_bp.route('/health-records/<int:record_id>', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_HEALTH_RECORD", "health_records")
@require_permission('health_records', 'write')
def update_health_record(record_id):
    return health_record_controller.update_health_record(record_id)

@api_bp.route('/health-records/<int:record_id>', methods=['DELETE'])
@jwt_required()
@audit_log("DELETE_HEALTH_RECORD", "health_records")
@require_permission('health_records', 'write')
def delete_health_record(record_id):
    return health_record_controller.delete_health_record(record_id)

@api_bp.route('/health-records/<int:record_id>/download/<int:file_index>', methods=['GET'])
@jwt_required()
@audit_log("DOWNLOAD_HEALTH_RECORD_FILE", "health_records")
@require_permission('health_records', 'read')
def download_health_record_file(record_id, file_index):
    return health_record_controller.download_health_record_file(record_id, file_index)


# --- Prescription Endpoints ---
@api_bp.route('/prescriptions', methods=['GET'])
@jwt_required()
@audit_log("VIEW_PRESCRIPTIONS", "prescriptions")
@require_permission('prescriptions', 'read')
def get_prescriptions():
    return prescription_controller.get_prescriptions()

@api_bp.route('/prescriptions/stats/summary', methods=['GET'])
@jwt_required()
@audit_log("VIEW_PRESCRIPTION_STATS", "prescriptions")
@require_permission('prescriptions', 'stats')
def get_prescription_stats():
    return prescription_controller.get_prescription_stats()

@api_bp.route('/prescriptions/<int:prescription_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_PRESCRIPTION", "prescriptions")
@require_permission('prescriptions', 'read')
def get_prescription(prescription_id):
    return prescription_controller.get_prescription(prescription_id)

@api_bp.route('/prescriptions', methods=['POST'])
@jwt_required()
@audit_log("CREATE_PRESCRIPTION", "prescriptions")
@require_permission('prescriptions', 'write')
def create_prescription():
    return prescription_controller.create_prescription()

@api_bp.route('/prescriptions/<int:prescription_id>', methods=['PUT'])
@jwt_required()
@audit_log("UPDATE_PRESCRIPTION", "prescriptions")
@require_permission('prescriptions', 'write')
def update_prescription(prescription_id):
    return prescription_controller.update_prescription(prescription_id)

@api_bp.route('/prescriptions/<int:prescription_id>/refill', methods=['POST'])
@jwt_required()
@audit_log("REFILL_PRESCRIPTION", "prescriptions")
@require_permission('prescriptions', 'refill')
def refill_prescription(prescription_id):
    return prescription_controller.refill_prescription(prescription_id)

@api_bp.route('/prescriptions/<int:prescription_id>', methods=['DELETE'])
@jwt_required()
@audit_log("CANCEL_PRESCRIPTION", "prescriptions")
@require_permission('prescriptions', 'write')
def cancel_prescription(prescription_id):
    return prescription_controller.cancel_prescription(prescription_id)


# --- Alert Endpoints ---
@api_bp.route('/alerts', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALERTS", "alerts")
@require_permission('alerts', 'read')
def get_alerts():
    return alert_controller.get_alerts()

@api_bp.route('/alerts/stats/summary', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALERT_STATS", "alerts")
@require_permission('alerts', 'stats')
def get_alert_stats():
    return alert_controller.get_alert_stats()

@api_bp.route('/alerts/read-all', methods=['PUT'])
@jwt_required()
@audit_log("MARK_ALL_ALERTS_READ", "alerts")
@require_permission('alerts', 'write')
def mark_all_alerts_read():
    return alert_controller.mark_all_alerts_read()

@api_bp.route('/alerts/<int:alert_id>', methods=['GET'])
@jwt_required()
@audit_log("VIEW_ALERT", "alerts")
@require_permission('alerts', 'read')
def get_alert(alert_id):
    return alert_controller.get_alert(alert_id)

@api_bp.route('/alerts', methods=['POST'])
@jwt_required()
@audit_log("CREATE_ALERT", "alerts")
@require_permission('alerts', 'create')
def create_alert():
    return alert_controller.create_alert()

@api_bp.route('/alerts/<int:alert_id>/read', methods=['PUT'])
@jwt_required()
@audit_log("MARK_ALERT_READ", "alerts")
@require_permission('alerts', 'write')
def mark_alert_read(alert_id):
    return alert_controller.mark_alert_read(alert_id)

@api_bp.route('/alerts/<int:alert_id>', methods=['DELETE'])
@jwt_required()
@audit_log("DELETE_ALERT", "alerts")
@require_permission('alerts', 'write')
def delete_alert(alert_id):
    return alert_controller.delete_alert(alert_id)
