from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
import click
import logging
import os

from .extensions import db, migrate, bcrypt, jwt, celery

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    from mindflow.config import config, get_config, ProductionConfig
    if config_name:
        config_class = config.get(config_name, config['default'])
    else:
        config_class = get_config()
    app.config.from_object(config_class)

    # Ensure production mode if FLASK_ENV is production
    if config_class is ProductionConfig or os.getenv('FLASK_ENV') == 'production':
        app.config['DEBUG'] = False
        app.config['TESTING'] = False
        ProductionConfig.validate()

    logging.getLogger('mindflow').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)

    # JWT errors use the same envelope as everything else
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'success': False, 'message': 'Authentication required'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'success': False, 'message': f'Invalid token: {reason}'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'success': False, 'message': 'Token has expired'}), 401

    from mindflow.services.video_token_service import VIDEO_TOKEN_TYPE

    @jwt.token_verification_loader
    def reject_video_credentials(jwt_header, jwt_data):
        return jwt_data.get('type') != VIDEO_TOKEN_TYPE

    @jwt.token_verification_failed_loader
    def video_credential_used(jwt_header, jwt_data):
        return jsonify({
            'success': False,
            'message': 'Video credentials cannot be used for API access'
        }), 401

    # Initialize CORS
    from mindflow.utils.cors import init_cors
    init_cors(app)

    # Initialize Celery
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_serializer=app.config['CELERY_TASK_SERIALIZER'],
        accept_content=app.config['CELERY_ACCEPT_CONTENT'],
        result_serializer=app.config['CELERY_RESULT_SERIALIZER'],
        timezone=app.config['CELERY_TIMEZONE'],
        enable_utc=app.config['CELERY_ENABLE_UTC'],
        beat_schedule=app.config['CELERY_BEAT_SCHEDULE'],
    )

    # Make celery tasks work with Flask app context
    class FlaskAppContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = FlaskAppContextTask

    # Error handlers
    from mindflow.services.exceptions import MindflowError

    @app.errorhandler(MindflowError)
    def handle_service_error(e):
        if e.status_code >= 500:
            logger.error("Service error: %s", e, exc_info=True)
        else:
            logger.info("%s: %s", type(e).__name__, e)
        return jsonify({
            'success': False,
            'message': e.message
        }), e.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'message': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'message': 'Method not allowed'
        }), 405

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({
            'success': False,
            'message': e.description
        }), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        db.session.rollback()
        message = 'Internal server error'
        if app.debug:
            message = f'An error occurred: {str(e)}'
        return jsonify({
            'success': False,
            'message': message
        }), 500

    # Setup logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_dir = app.config.get('LOG_DIR', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('mindflow').addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Application startup')

    # Request logging and security headers
    from mindflow.middleware import setup_middleware
    setup_middleware(app)

    # Import models to register them with SQLAlchemy
    with app.app_context():
        from .models import User, Patient, Doctor, Session, CheckIn, AuditLog  # noqa: F401

        # Register blueprints
        from .routes import auth_bp, appointment_bp, session_bp, check_in_bp, video_bp, health_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(auth_bp)
        app.register_blueprint(appointment_bp)
        app.register_blueprint(session_bp)
        app.register_blueprint(check_in_bp)
        app.register_blueprint(video_bp)

        from .services.registry import init_services
        init_services(app, db.session)

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop all tables first.')
    def init_db_command(drop):
        """Create all tables (including the partial unique slot index)."""
        if drop:
            db.drop_all()
        db.create_all()
        click.echo('Database initialised.')

    return app
