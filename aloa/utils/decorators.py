# /aloa/utils/decorators.py
from functools import wraps
from flask import g, request, current_app, make_response
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from sqlalchemy.exc import SQLAlchemyError

from aloa.extensions import db
from aloa.models.system_models import AuditLog
from aloa.models.user_models import User
from aloa.utils.errors import AccessDenied
from aloa.utils.policies import has_capability


def get_current_user():
    """Returns the authenticated User, loaded once per token identity."""
    verify_jwt_in_request()
    identity = get_jwt_identity()
    user = g.get('current_user')
    if user is None or str(user.id) != str(identity):
        user = db.session.get(User, int(identity)) if identity else None
        g.current_user = user
    return user


def _write_audit_entry(user_id, action, resource, resource_id, success, details):
    log_entry = AuditLog(
        user_id=user_id,
        action=action,
        resource=resource,
        resource_id=resource_id,
        ip_address=request.remote_addr,
        user_agent=(request.headers.get('User-Agent') or '')[:255],
        success=success,
        details=details
    )
    try:
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.audit_logger.error(f"Failed to log audit entry due to DB error: {db_error}")

    log = current_app.audit_logger.info if success else current_app.audit_logger.error
    log(f"Action='{action}', Resource='{resource}', ResourceID='{resource_id}', "
        f"UserID='{user_id}', Success='{success}', Details='{details}'")


def audit_log(action, resource):
    """Records every call of the wrapped view in the audit trail."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_id = None
            try:
                identity = get_jwt_identity()
                user_id = int(identity) if identity else None
            except RuntimeError:
                # No JWT on this request (registration, login)
                pass

            resource_id = next((str(v) for k, v in kwargs.items() if k.endswith('_id')), None)
            if action == "USER_REGISTRATION" and request.is_json:
                data = request.get_json(silent=True) or {}
                resource_id = data.get('email')

            try:
                response = make_response(f(*args, **kwargs))
            except Exception as e:
                db.session.rollback()
                _write_audit_entry(user_id, action, resource, resource_id, False,
                                   f"{type(e).__name__}: {e}")
                raise

            success = response.status_code < 400
            _write_audit_entry(user_id, action, resource, resource_id, success,
                               f"Status: {response.status_code}")
            return response

        return decorated_function
    return decorator


def require_permission(resource, action):
    """Checks that the caller is an active user whose role grants (resource, action)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()

            if not user or not user.is_active:
                raise AccessDenied('User not found or inactive')

            if not has_capability(user, resource, action):
                raise AccessDenied('Permission denied')

            return f(*args, **kwargs)
        return decorated_function
    return decorator
