# /aloa/schemas/__init__.py
"""Request shape contracts, one module per resource."""
import re
from datetime import datetime, timezone

TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def one_of(value, choices, message):
    """Raises ValueError(message) unless value is one of choices."""
    if value is not None and value not in choices:
        raise ValueError(message)
    return value


def normalize_time(value):
    """Validates an HH:MM time and zero-pads the hour ('9:30' -> '09:30')."""
    if value is None:
        return None
    match = TIME_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError('Valid time format (HH:MM) is required')
    return f'{int(match.group(1)):02d}:{match.group(2)}'


def to_naive_utc(value):
    """Stored datetimes are naive UTC."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def split_tags(value):
    """Accepts a list of tags or a comma separated string."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(',')
    return [str(tag).strip() for tag in value if str(tag).strip()]
