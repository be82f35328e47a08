import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter.errors import RateLimitExceeded

from tankerfleet.config import DevConfig
from tankerfleet.extensions import db, limiter

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

BLUEPRINTS = [
    ('driver', '/api'),
    ('route', '/api'),
    ('payout_slab', '/api'),
    ('job', '/api'),
    ('trip', '/api'),
    ('payout', '/api'),
    ('reports', '/api'),
    ('admin', '/api'),
]


def configure_logging(app):
    handlers = [logging.StreamHandler()]
    logs_dir = app.config.get('LOGS_DIR')
    if logs_dir:
        os.makedirs(logs_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(logs_dir, 'app.log')))
    logging.basicConfig(
        level=logging.DEBUG if app.config.get('DEBUG') else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=handlers,
    )


def register_models():
    # Import all model classes so relationships resolve before create_all
    from tankerfleet.models.owner import Owner  # noqa: F401
    from tankerfleet.models.subscription_key import SubscriptionKey  # noqa: F401
    from tankerfleet.models.driver import Driver  # noqa: F401
    from tankerfleet.models.route import Route  # noqa: F401
    from tankerfleet.models.payout_slab import PayoutSlab  # noqa: F401
    from tankerfleet.models.job import Job  # noqa: F401
    from tankerfleet.models.job_event import JobEvent  # noqa: F401
    from tankerfleet.models.trip import Trip  # noqa: F401


def register_blueprints(app):
    for blueprint_name, prefix in BLUEPRINTS:
        module = __import__(f'tankerfleet.api.{blueprint_name}', fromlist=[f'{blueprint_name}_bp'])
        blueprint = getattr(module, f'{blueprint_name}_bp')
        app.register_blueprint(blueprint, url_prefix=prefix)
        logger.debug(f"Registered blueprint: {blueprint_name} with prefix: {prefix}")


def register_error_handlers(app):
    @app.errorhandler(400)
    def bad_request(error):
        logger.error(f"400 Bad Request for {request.method} {request.url}: {error}")
        return jsonify({'error': 'Bad Request', 'message': str(error), 'path': request.path}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        logger.error(f"401 Unauthorized for {request.method} {request.url}")
        return jsonify({'error': 'Authentication required'}), 401

    @app.errorhandler(403)
    def forbidden(error):
        logger.error(f"403 Forbidden for {request.method} {request.url}")
        return jsonify({'error': 'Access forbidden'}), 403

    @app.errorhandler(404)
    def not_found(error):
        logger.error(f"404 error for path: {request.path}")
        if request.path.startswith('/api/'):
            return jsonify({'error': 'API endpoint not found', 'path': request.path}), 404
        return jsonify({'error': 'Page not found', 'path': request.path}), 404

    @app.errorhandler(409)
    def conflict(error):
        return jsonify({'error': 'Conflict', 'message': str(error)}), 409

    @app.errorhandler(RateLimitExceeded)
    def ratelimit_handler(e):
        logger.warning(f"Rate limit exceeded for {request.method} {request.url}")
        return jsonify({'error': 'Rate limit exceeded. Please try again later.'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled exception for {request.method} {request.url}: {error}", exc_info=True)
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config_class=DevConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if uri.startswith('sqlite:///') and ':memory:' not in uri:
        os.makedirs(os.path.dirname(uri[len('sqlite:///'):]), exist_ok=True)
    logger.info("Database connected: %s", "sqlite" if "sqlite" in uri else "non-sqlite")

    db.init_app(app)
    limiter.init_app(app)
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": app.config['FRONTEND_ORIGINS']}})

    with app.app_context():
        register_models()
        db.create_all()

    register_blueprints(app)
    register_error_handlers(app)

    @app.before_request
    def log_request_info():
        logger.debug(f"Request: {request.method} {request.url}")
        if request.is_json and request.content_length:
            logger.debug(f"JSON data: {request.get_json(silent=True)}")

    @app.after_request
    def log_response_info(response):
        logger.debug(f"Response: {response.status_code}")
        if response.status_code >= 500:
            logger.error(f"Error response: {response.status_code} for {request.method} {request.url}")
        elif response.status_code >= 400:
            logger.info(f"Response {response.status_code} for {request.method} {request.path}: "
                        f"{response.get_data(as_text=True)[:500]}")
        return response

    @app.route('/')
    def root():
        return {'status': 'ok', 'message': 'TankerFleet Backend API is running. Available endpoints: /api/*'}

    @app.route('/api/health-check')
    def health_check():
        healthy = db.health_check()
        body = {'status': 'ok' if healthy else 'degraded', 'database': healthy, 'pool': db.get_pool_stats()}
        return jsonify(body), 200 if healthy else 503

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host=app.config.get('FLASK_HOST', '0.0.0.0'), port=app.config.get('FLASK_PORT', 5000),
            debug=app.config.get('DEBUG', False))
