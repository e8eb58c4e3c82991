"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask

from exam_portal.config import get_config
from exam_portal.errors import register_error_handlers
from exam_portal.extensions import db
from exam_portal.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from exam_portal.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions
    db.init_app(app)

    register_error_handlers(app)

    # Register blueprints
    from exam_portal.routes import auth_bp, teacher_bp, student_bp, public_bp

    # Teacher login/logout
    app.register_blueprint(auth_bp, url_prefix='/api/teacher')

    # Teacher-owned resources
    app.register_blueprint(teacher_bp, url_prefix='/api/teacher')

    # Student attempts
    app.register_blueprint(student_bp, url_prefix='/api/submissions')

    # Public listings
    app.register_blueprint(public_bp)

    # Create database tables
    with app.app_context():
        from exam_portal import models  # noqa: F401
        db.create_all()
        logger.info('Database tables created/verified')

    return app
