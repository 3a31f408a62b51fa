# /aloa/api/controllers/alert_controller.py
from flask import current_app, request
from aloa.models.alert_models import Alert, ALERT_TYPES, ALERT_PRIORITIES
from aloa.models.user_models import User
from aloa.schemas.alert_schemas import AlertCreateSchema
from aloa.services import alert_service
from aloa.api.controllers import get_or_404
from aloa.extensions import db
from aloa.utils.decorators import get_current_user
from aloa.utils.policies import authorize, scope_query
from aloa.utils.responses import success_response, pagination_meta
from aloa.utils.validation import validate_payload, get_json_body, get_pagination_args


def get_alerts():
    """The caller's unexpired alerts, newest first, plus their unread count."""
    user = get_current_user()
    page, limit = get_pagination_args(current_app.config['ALERT_PAGE_SIZE'])

    query = scope_query(user, 'alerts', Alert.query, Alert).filter(Alert.unexpired())

    is_read = request.args.get('is_read')
    if is_read in ('true', 'false'):
        query = query.filter(Alert.is_read.is_(is_read == 'true'))

    alert_type = request.args.get('type')
    if alert_type in ALERT_TYPES:
        query = query.filter(Alert.type == alert_type)

    priority = request.args.get('priority')
    if priority in ALERT_PRIORITIES:
        query = query.filter(Alert.priority == priority)

    page_obj = (query.order_by(Alert.created_at.desc(), Alert.id.desc())
                .paginate(page=page, per_page=limit, error_out=False))
    return success_response({
        'alerts': [alert.to_dict() for alert in page_obj.items],
        'pagination': pagination_meta(page_obj),
        'unread_count': alert_service.unread_count(user.id),
    })


def get_alert(alert_id):
    alert = get_or_404(Alert, alert_id, 'Alert not found')
    authorize(get_current_user(), 'alerts', 'read', alert)
    return success_response({'alert': alert.to_dict()})


def create_alert():
    payload = validate_payload(AlertCreateSchema, get_json_body())
    get_or_404(User, payload.user, 'User not found')

    alert = alert_service.create_alert(
        user_id=payload.user,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        priority=payload.priority,
        scheduled_for=payload.scheduled_for,
        expires_at=payload.expires_at,
        related_model=payload.related_model,
        related_id=payload.related_id,
        action_url=payload.action_url,
        extra=payload.metadata,
    )
    return success_response({'alert': alert.to_dict()}, message='Alert created successfully', status=201)


def mark_alert_read(alert_id):
    alert = get_or_404(Alert, alert_id, 'Alert not found')
    authorize(get_current_user(), 'alerts', 'update', alert)

    alert_service.mark_alert_read(alert)
    return success_response({'alert': alert.to_dict()}, message='Alert marked as read')


def mark_all_alerts_read():
    updated = alert_service.mark_all_read(get_current_user().id)
    return success_response({'updated': updated}, message='All alerts marked as read')


def delete_alert(alert_id):
    alert = get_or_404(Alert, alert_id, 'Alert not found')
    authorize(get_current_user(), 'alerts', 'delete', alert)

    db.session.delete(alert)
    db.session.commit()
    return success_response(message='Alert deleted successfully')


def get_alert_stats():
    return success_response(alert_service.alert_stats())
