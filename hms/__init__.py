import os
from flask import Flask
from hms.extensions import db, migrate, jwt, limiter, cors
from hms.services.identity import identity_client
from hms.utils.encryption_util import encryptor
from hms.utils.cloudinary_util import cloudinary_manager
from hms.utils.error_handlers import register_error_handlers, register_jwt_handlers
from hms.middleware import register_route_guard
from hms.commands import register_commands
from config import config


def create_app(config_name=None):
    app = Flask(__name__)
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        origins=app.config['ALLOWED_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization', 'X-Requested-With'],
        methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
    )

    # Initialize custom utilities
    encryptor.init_app(app)
    cloudinary_manager.init_app(app)
    identity_client.init_app(app)

    # Initialize app with config
    config_class.init_app(app)

    # Models must be imported before create_all / migrations see the metadata
    from hms import models  # noqa: F401

    # Register blueprints
    from hms.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    from hms.pages import pages_bp
    app.register_blueprint(pages_bp)

    # Register error handlers, route guard and commands
    register_error_handlers(app)
    register_jwt_handlers()
    register_route_guard(app)
    register_commands(app)

    return app
