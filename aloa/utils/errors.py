# /aloa/utils/errors.py


class ApiError(Exception):
    """Base class for errors that are reported to the caller in the response envelope."""
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message=None, status_code=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class ValidationFailed(ApiError):
    status_code = 400
    default_message = 'Validation failed'


class AccessDenied(ApiError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Resource not found'


class DomainConflict(ApiError):
    """A well-formed request that the current state of the records does not allow."""
    status_code = 400
    default_message = 'Request conflicts with the current state of the record'


class SlotUnavailable(DomainConflict):
    status_code = 409
    default_message = 'Doctor is not available at this time slot'
