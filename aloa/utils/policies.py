# /aloa/utils/policies.py
"""Authorization policy, one rule set per resource type.

Routes check coarse capabilities with ``require_permission``; controllers
then call ``scope_query`` for lists and ``authorize`` for single rows.
"""
from aloa.utils.errors import AccessDenied

ROLE_CAPABILITIES = {
    'patient': {
        ('appointments', 'read'), ('appointments', 'write'),
        ('health_records', 'read'), ('health_records', 'write'),
        ('prescriptions', 'read'), ('prescriptions', 'refill'),
        ('alerts', 'read'), ('alerts', 'write'),
        ('doctors', 'read'),
    },
    'doctor': {
        ('appointments', 'read'), ('appointments', 'write'),
        ('health_records', 'read'), ('health_records', 'write'),
        ('prescriptions', 'read'), ('prescriptions', 'write'), ('prescriptions', 'stats'),
        ('alerts', 'read'), ('alerts', 'write'),
        ('doctors', 'read'),
    },
    'admin': {
        ('appointments', 'read'), ('appointments', 'write'),
        ('health_records', 'read'), ('health_records', 'write'),
        ('prescriptions', 'read'), ('prescriptions', 'write'), ('prescriptions', 'stats'),
        ('alerts', 'read'), ('alerts', 'write'), ('alerts', 'create'), ('alerts', 'stats'),
        ('doctors', 'read'),
        ('users', 'admin'),
    },
}


def has_capability(user, resource, action):
    return (resource, action) in ROLE_CAPABILITIES.get(user.role, set())


def _is_admin(user):
    return user.role == 'admin'


def _appointment_rule(user, appointment, action):
    # read, update, cancel
    return _is_admin(user) or user.id in (appointment.patient_id, appointment.doctor_id)


def _health_record_rule(user, record, action):
    if _is_admin(user) or record.patient_id == user.id:
        return True
    # The doctor of record may view and edit but not delete.
    return action in ('read', 'update', 'download') and record.doctor_id == user.id


def _prescription_rule(user, prescription, action):
    if action == 'refill':
        return prescription.patient_id == user.id
    if _is_admin(user):
        return True
    if action == 'read':
        return user.id in (prescription.patient_id, prescription.doctor_id)
    # update, cancel
    return prescription.doctor_id == user.id


def _alert_rule(user, alert, action):
    if action == 'delete' and _is_admin(user):
        return True
    return alert.user_id == user.id


_ROW_RULES = {
    'appointments': _appointment_rule,
    'health_records': _health_record_rule,
    'prescriptions': _prescription_rule,
    'alerts': _alert_rule,
}


def can(user, resource, action, row):
    return _ROW_RULES[resource](user, row, action)


def authorize(user, resource, action, row):
    """Raises AccessDenied unless user may perform action on row."""
    if not can(user, resource, action, row):
        raise AccessDenied()
    return row


def scope_query(user, resource, query, model):
    """Narrows a list query to the rows the caller may see."""
    if resource == 'alerts':
        return query.filter(model.user_id == user.id)
    if user.role == 'patient':
        return query.filter(model.patient_id == user.id)
    if user.role == 'doctor':
        return query.filter(model.doctor_id == user.id)
    return query
