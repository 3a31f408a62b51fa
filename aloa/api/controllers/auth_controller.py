# /aloa/api/controllers/auth_controller.py
from datetime import datetime
from flask import current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    get_jwt_identity, get_jwt
)
from aloa.extensions import db
from aloa.models.user_models import User
from aloa.models.system_models import RevokedToken
from aloa.schemas.auth_schemas import RegisterSchema, LoginSchema
from aloa.utils.decorators import get_current_user
from aloa.utils.errors import AccessDenied, NotFound, ValidationFailed
from aloa.utils.responses import success_response, error_response
from aloa.utils.validation import validate_payload, get_json_body


def _issue_tokens(user):
    # The token carries the user id and role only, no PII.
    access_token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
    refresh_token = create_refresh_token(identity=str(user.id))
    return access_token, refresh_token


def register_user():
    """Self-registration for patients and doctors."""
    payload = validate_payload(RegisterSchema, get_json_body())

    if User.find_by_email(payload.email):
        return error_response('Email already exists', 409)

    user = User(
        name=payload.name,
        email=User.normalize_email(payload.email),
        role=payload.role,
        specialization=payload.specialization if payload.role == 'doctor' else None,
        phone=payload.phone,
    )
    try:
        user.set_password(payload.password)
    except ValueError as e:
        raise ValidationFailed(errors=[{'field': 'password', 'message': str(e)}])

    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"Registered {user.role} account {user.id}")

    access_token, refresh_token = _issue_tokens(user)
    return success_response({
        'user': user.to_dict(),
        'user_id': user.id,
        'access_token': access_token,
        'refresh_token': refresh_token,
    }, message='User registered successfully', status=201)


def login_user():
    payload = validate_payload(LoginSchema, get_json_body())
    user = User.find_by_email(payload.email)

    if not user:
        return error_response('Invalid credentials', 401)
    if user.is_locked:
        return error_response('Account locked due to multiple failed attempts', 423)

    is_valid = user.check_password(payload.password)
    db.session.commit()  # persist the failed-attempt counter either way

    if not is_valid:
        if user.is_locked:
            return error_response('Account locked due to multiple failed attempts', 423)
        return error_response('Invalid credentials', 401)
    if not user.is_active:
        return error_response('Account deactivated', 403)

    access_token, refresh_token = _issue_tokens(user)
    return success_response({
        'access_token': access_token,
        'refresh_token': refresh_token,
        'user': user.to_dict(),
    }, message='Login successful')


def logout_user():
    token = get_jwt()
    db.session.add(RevokedToken(jti=token['jti'], expires_at=datetime.utcfromtimestamp(token['exp'])))
    db.session.commit()
    return success_response(message='Successfully logged out')


def refresh_token():
    user = db.session.get(User, int(get_jwt_identity()))
    if not user or not user.is_active:
        raise AccessDenied('User not found or inactive')

    access_token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
    return success_response({'access_token': access_token})


def get_me():
    user = get_current_user()
    if not user:
        raise NotFound('User not found')
    return success_response({'user': user.to_dict()})
