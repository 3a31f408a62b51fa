# /aloa/socket_handlers/alert_handler.py
from flask import current_app
from flask_socketio import emit, join_room
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from aloa.extensions import socketio
from aloa.services.alert_service import user_room


@socketio.on('join')
def on_join(data):
    """Subscribes the socket to its user's alert room. Expects {'token': <access token>}."""
    token = (data or {}).get('token')
    if not token:
        emit('error', {'message': 'Authentication required'})
        return
    try:
        decoded_token = decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        current_app.logger.warning(f"Rejected socket join: {e}")
        emit('error', {'message': 'Invalid token'})
        return

    room = user_room(decoded_token['sub'])
    join_room(room)
    emit('joined', {'room': room})
