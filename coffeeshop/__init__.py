"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from coffeeshop.database import init_db, create_all


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Redis cache
    from coffeeshop.services.cache_service import init_cache
    init_cache(app)

    # Prometheus instrumentation
    from coffeeshop.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: trust the reverse proxy headers
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)
    if app.config.get('TESTING'):
        create_all()

    # Error Handlers
    from coffeeshop.exceptions import ShopError

    @app.errorhandler(ShopError)
    def handle_shop_error(error):
        """Render application exceptions in the response envelope."""
        if error.status_code >= 500:
            app.logger.error(f"ShopError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"ShopError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'success': False, 'message': 'internal server error'}), 500

    # Register blueprints
    from coffeeshop.blueprints.main import main_bp
    from coffeeshop.blueprints.catalog import catalog_bp
    from coffeeshop.blueprints.cart import cart_bp
    from coffeeshop.blueprints.transactions import transactions_bp
    from coffeeshop.blueprints.history import history_bp
    from coffeeshop.blueprints.metrics import metrics_bp
    from coffeeshop.blueprints.auth import auth_bp
    from coffeeshop.blueprints.profile import profile_bp
    from coffeeshop.blueprints.admin_products import admin_products_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(admin_products_bp)

    # Register CLI commands
    from coffeeshop.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
