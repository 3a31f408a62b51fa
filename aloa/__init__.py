import os
from flask import Flask
from aloa.extensions import db, bcrypt, migrate, jwt, limiter, cors, socketio
from aloa.utils.encryption_util import field_encryptor
from aloa.utils.storage_util import record_storage
from aloa.utils.error_handlers import register_error_handlers, register_jwt_handlers
from aloa.commands import register_commands
from config import config


def create_app(config_name=None):
    config_name = config_name or os.environ.get('FLASK_CONFIG') or 'default'
    config_class = config[config_name]

    app = Flask(__name__)
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(app, origins=app.config['ALLOWED_ORIGINS'],
                  allow_headers=['Content-Type', 'Authorization', 'X-Requested-With'],
                  methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'])

    # Threading mode keeps the dev server and the flask CLI on the same footing
    socketio.init_app(app, cors_allowed_origins=app.config['ALLOWED_ORIGINS'], async_mode='threading')

    # Initialize custom utilities
    field_encryptor.init_app(app)
    record_storage.init_app(app)

    from aloa import models  # noqa: F401

    # Register blueprints
    from aloa.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    from aloa.socket_handlers import alert_handler  # noqa: F401

    # Register error handlers and commands
    register_error_handlers(app)
    register_jwt_handlers()
    register_commands(app)

    return app
