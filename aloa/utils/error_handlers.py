# /aloa/utils/error_handlers.py
from flask import current_app
from aloa.extensions import db, jwt
from aloa.utils.errors import ApiError
from aloa.utils.responses import error_response


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def api_error(error):
        db.session.rollback()
        return error_response(error.message, error.status_code, error.errors)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Resource not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(413)
    def payload_too_large(error):
        return error_response('Uploaded content is too large', 413)

    @app.errorhandler(429)
    def rate_limited(error):
        return error_response(f"Too many requests: {error.description}", 429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.logger.error(f"Internal server error: {getattr(error, 'original_exception', None) or error}")
        current_app.audit_logger.error(f"Internal server error: {str(error)}")
        return error_response('Server error', 500)


def register_jwt_handlers():
    """Every token problem is reported as a 401 in the response envelope."""
    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response('Access token required', 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response('Invalid token', 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response('Token has expired', 401)

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return error_response('Token has been revoked', 401)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        from aloa.models.system_models import RevokedToken
        return RevokedToken.is_revoked(jwt_payload['jti'])
