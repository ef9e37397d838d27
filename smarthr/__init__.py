import logging

from flask import Flask, current_app, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
    'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS',
}


def get_gateway():
    return current_app.extensions['smarthr.gateway']


def get_mailer():
    return current_app.extensions['smarthr.mailer']


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    logging.getLogger('smarthr').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_class=Config, gateway=None, mailer=None):
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    @login_manager.unauthorized_handler
    def unauthorized():
        from smarthr.api.envelope import error_response
        return error_response('Authentication required', 401)

    with app.app_context():
        from . import models

    from smarthr.gateway import PersistenceGateway
    from smarthr.email import EmailClient
    app.extensions['smarthr.gateway'] = gateway or PersistenceGateway(db.session, models.TABLES)
    app.extensions['smarthr.mailer'] = mailer or EmailClient.from_config(app.config)

    @app.before_request
    def short_circuit_preflight():
        # Preflight never reaches routing, auth or validation
        if request.method == 'OPTIONS':
            return app.response_class('', status=200, mimetype='application/json')

    @app.after_request
    def add_cors_headers(response):
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response

    _register_error_handlers(app)

    from .api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix=app.config['FUNCTIONS_PREFIX'])

    from .auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    from .reports import bp as reports_bp
    app.register_blueprint(reports_bp, url_prefix='/reports')

    from .commands import register_commands
    register_commands(app)

    return app


def _register_error_handlers(app):
    from smarthr.api.envelope import error_response
    from smarthr.errors import ApiError, NotFound

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        status = error.status_code
        if isinstance(error, NotFound) and app.config.get('NOT_FOUND_AS_404'):
            status = 404
        if status >= 500:
            logger.error('%s function error: %s', _resource_name(), error.message)
        return error_response(error.payload, status)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            return error_response('Not found', 404)
        if error.code == 405:
            return error_response('Method not allowed', 405)
        return error_response(error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('%s function error', _resource_name())
        return error_response(str(error) or 'Internal server error', 500)


def _resource_name():
    return (request.endpoint or 'app').split('.')[-1].capitalize()
