# /aloa/api/controllers/user_controller.py
from flask import request, current_app
from aloa.extensions import db
from aloa.models.user_models import User, ROLES
from aloa.schemas.auth_schemas import UserStatusSchema
from aloa.api.controllers import get_or_404
from aloa.utils.decorators import get_current_user
from aloa.utils.errors import DomainConflict
from aloa.utils.responses import success_response, pagination_meta
from aloa.utils.validation import validate_payload, get_json_body, get_pagination_args


def get_active_doctors():
    """Doctors a patient can book with."""
    query = User.query.filter_by(role='doctor', is_active=True)
    specialization = request.args.get('specialization')
    if specialization:
        query = query.filter(User.specialization.ilike(f'%{specialization}%'))

    doctors = query.order_by(User.name).all()
    return success_response({'doctors': [d.to_summary() for d in doctors]})


def get_all_users():
    page, limit = get_pagination_args()
    query = User.query

    role = request.args.get('role')
    if role in ROLES:
        query = query.filter_by(role=role)

    page_obj = query.order_by(User.created_at.desc()).paginate(page=page, per_page=limit, error_out=False)
    return success_response({
        'users': [u.to_dict() for u in page_obj.items],
        'pagination': pagination_meta(page_obj),
    })


def set_user_status(user_id):
    """Activates or deactivates an account. Admins cannot deactivate themselves."""
    admin = get_current_user()
    user = get_or_404(User, user_id, 'User not found')
    payload = validate_payload(UserStatusSchema, get_json_body())

    if user.id == admin.id and not payload.is_active:
        raise DomainConflict('You cannot deactivate your own account')

    user.is_active = payload.is_active
    db.session.commit()
    current_app.logger.info(f"User {user.id} {'activated' if user.is_active else 'deactivated'} by admin {admin.id}")
    return success_response({'user': user.to_dict()}, message='User status updated')
