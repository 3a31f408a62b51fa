# /aloa/utils/validation.py
from datetime import date
from flask import current_app, request
from pydantic import ValidationError

from aloa.utils.errors import ValidationFailed


def _format_errors(exc: ValidationError):
    errors = []
    for err in exc.errors():
        field = '.'.join(str(part) for part in err['loc']) or 'body'
        message = err['msg']
        # pydantic prefixes custom ValueError messages
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        errors.append({'field': field, 'message': message})
    return errors


def validate_payload(schema, data):
    """Validates request data against a pydantic schema.

    Raises ValidationFailed carrying one entry per offending field so the
    caller gets the full list at once and nothing is written.
    """
    if data is None:
        raise ValidationFailed(errors=[{'field': 'body', 'message': 'Request body is required'}])
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(errors=_format_errors(exc))


def get_json_body():
    return request.get_json(silent=True)


def get_pagination_args(default_size=None):
    """Reads page/limit query parameters, clamped to the configured bounds."""
    default_size = default_size or current_app.config['DEFAULT_PAGE_SIZE']
    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default_size, type=int) or default_size
    page = max(page, 1)
    limit = min(max(limit, 1), current_app.config['MAX_PAGE_SIZE'])
    return page, limit


def get_date_arg(name, required=False):
    """Parses a YYYY-MM-DD query parameter."""
    raw = request.args.get(name)
    if not raw:
        if required:
            raise ValidationFailed(f'{name.capitalize()} is required',
                                   errors=[{'field': name, 'message': f'{name.capitalize()} is required'}])
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        raise ValidationFailed(errors=[{'field': name, 'message': 'Valid date is required'}])
