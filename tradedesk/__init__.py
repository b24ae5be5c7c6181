"""Flask application factory."""
import logging
import traceback

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from tradedesk.database import init_db


def create_app(config_object='config.Config', repository_factory=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    
    # Logging level from LOG_LEVEL (module loggers inherit from the root logger)
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    app.logger.setLevel(level)
    
    # Initialize database
    init_db(app)
    
    # One workspace (catalog/order snapshots + order wizard) per account
    from tradedesk.services.workspace_service import WorkspaceRegistry, sql_repositories
    app.extensions['workspaces'] = WorkspaceRegistry(repository_factory or sql_repositories)
    
    # Account context before each request
    from tradedesk.middleware import load_account

    @app.before_request
    def before_request_handler():
        """Load account context for each request."""
        load_account()

    # Error Handlers
    from tradedesk.exceptions import TradeDeskError

    @app.errorhandler(TradeDeskError)
    def handle_tradedesk_error(error):
        """Handle custom application exceptions."""
        log = app.logger.error if error.status_code >= 500 else app.logger.warning
        log(f"{error.__class__.__name__} [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception on {request.method} {request.path}: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from tradedesk.blueprints.main import main_bp
    from tradedesk.blueprints.catalog import catalog_bp
    from tradedesk.blueprints.orders import orders_bp
    from tradedesk.blueprints.customers import customers_bp
    
    app.register_blueprint(main_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(customers_bp)
    
    # Register CLI commands
    from tradedesk.cli_commands import init_cli_commands
    init_cli_commands(app)
    
    app.logger.info(f"DB_CREATE_ALL={app.config.get('DB_CREATE_ALL')} DEFAULT_ACCOUNT_ID={app.config.get('DEFAULT_ACCOUNT_ID')}")
    
    return app
