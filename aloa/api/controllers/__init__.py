# /aloa/api/controllers/__init__.py
from aloa.extensions import db
from aloa.utils.errors import NotFound


def get_or_404(model, object_id, message):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFound(message)
    return obj
