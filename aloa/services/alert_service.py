# /aloa/services/alert_service.py
from datetime import datetime
from flask import current_app
from sqlalchemy import func

from aloa.extensions import db, socketio
from aloa.models.alert_models import Alert

REMINDER_TITLE = 'Appointment Reminder'
REMINDER_MESSAGE = 'You have an appointment scheduled for tomorrow.'


def user_room(user_id):
    return f"user_{user_id}"


def push_alert(alert):
    """Emits a due alert to the owner's Socket.IO room. Failures are logged only."""
    if not alert.is_due:
        return
    try:
        socketio.emit('new_alert', alert.to_dict(), to=user_room(alert.user_id))
    except Exception as e:
        current_app.logger.error(f"Failed to push alert {alert.id} to user {alert.user_id}: {e}")


def create_alert(**fields):
    alert = Alert(**fields)
    db.session.add(alert)
    db.session.commit()
    push_alert(alert)
    return alert


def build_appointment_reminder(appointment):
    """Reminder alert for the patient, due one lead time before the appointment."""
    scheduled_at = appointment.scheduled_at
    return Alert(
        user_id=appointment.patient_id,
        type='appointment',
        title=REMINDER_TITLE,
        message=REMINDER_MESSAGE,
        priority='medium',
        scheduled_for=scheduled_at - current_app.config['REMINDER_LEAD_TIME'],
        expires_at=scheduled_at,
        related_model='Appointment',
        related_id=appointment.id,
    )


def create_appointment_reminder(appointment):
    """Inserts the reminder for a freshly booked appointment.

    Runs after the appointment has been committed. A failure here is logged
    and swallowed so it never fails the booking; returns None in that case.
    """
    appointment_id = appointment.id
    try:
        alert = build_appointment_reminder(appointment)
        db.session.add(alert)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create appointment reminder for appointment {appointment_id}: {e}")
        return None
    push_alert(alert)
    return alert


def _appointment_reminders(appointment_id):
    return Alert.query.filter_by(type='appointment', related_model='Appointment', related_id=appointment_id)


def dismiss_appointment_reminder(appointment):
    """Deletes the reminder of an appointment that will no longer take place.

    Failures are logged and swallowed like reminder creation.
    """
    appointment_id = appointment.id
    try:
        removed = _appointment_reminders(appointment_id).delete(synchronize_session='fetch')
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to remove appointment reminder for appointment {appointment_id}: {e}")
        return 0
    return removed


def replace_appointment_reminder(appointment):
    """Re-issues the reminder after the appointment moved to another slot."""
    dismiss_appointment_reminder(appointment)
    return create_appointment_reminder(appointment)


def mark_alert_read(alert):
    """Marks an alert read. read_at is only set the first time."""
    alert.is_read = True
    if alert.read_at is None:
        alert.read_at = datetime.utcnow()
    db.session.commit()
    return alert


def mark_all_read(user_id):
    """Marks every unread, unexpired alert of the user as read. Returns the count."""
    now = datetime.utcnow()
    updated = Alert.query.filter(
        Alert.user_id == user_id,
        Alert.is_read.is_(False),
        Alert.unexpired(now),
    ).update({Alert.is_read: True, Alert.read_at: now}, synchronize_session=False)
    db.session.commit()
    return updated


def unread_count(user_id):
    return Alert.query.filter(
        Alert.user_id == user_id,
        Alert.is_read.is_(False),
        Alert.unexpired(),
    ).count()


def alert_stats():
    by_type = db.session.query(Alert.type, func.count(Alert.id)).group_by(Alert.type).all()
    by_priority = db.session.query(Alert.priority, func.count(Alert.id)).group_by(Alert.priority).all()
    return {
        'total_alerts': Alert.query.count(),
        'unread_alerts': Alert.query.filter(Alert.is_read.is_(False)).count(),
        'urgent_alerts': Alert.query.filter(Alert.priority == 'urgent', Alert.is_read.is_(False)).count(),
        'type_breakdown': {alert_type: count for alert_type, count in by_type},
        'priority_breakdown': {priority: count for priority, count in by_priority},
    }
