"""
Flask application factory and extension initialization.
"""
import os
import json

from flask import Flask
from flask_cors import CORS


def create_app(config_object=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Configure app
    if config_object:
        # Load base configuration from object
        app.config.from_object(config_object)

        # Configure logging first
        app.logger.setLevel('INFO')

        with app.app_context():
            # Load dynamic configuration from config file
            app.logger.info("Loading dynamic configuration")
            try:
                if os.path.exists(app.config['NASSTORE_CONFIG']):
                    app.logger.info(f"Found config at {app.config['NASSTORE_CONFIG']}, loading configuration...")
                    with open(app.config['NASSTORE_CONFIG'], 'r') as f:
                        config_data = json.load(f)

                    global_config = config_data.get('global', {})

                    # Load admin PIN from config
                    if 'pin' in global_config.get('admin', {}):
                        app.config['ADMIN_PIN'] = global_config['admin']['pin']
                        app.logger.info("Loaded admin PIN from configuration")
                    else:
                        app.logger.warning("Admin PIN not found in configuration, using default")

                    # Load CORS origins if available
                    if 'allowed_origins' in global_config.get('cors', {}):
                        app.config['CORS_ORIGINS'] = global_config['cors']['allowed_origins']
                        app.logger.info(f"Loaded CORS origins: {app.config['CORS_ORIGINS']}")
                    else:
                        app.logger.warning("No CORS origins found in configuration, using defaults")
                else:
                    app.logger.warning(f"Configuration file not found at {app.config['NASSTORE_CONFIG']}")
            except Exception as e:
                app.logger.error(f"Error loading configuration: {str(e)}")
                app.logger.exception("Full traceback:")

    # Initialize CORS with dynamic origins
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config.get('CORS_ORIGINS') or ["https://home.arpa"],
            "supports_credentials": True,
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With", "Origin", "X-Admin-Token"],
            "methods": ["GET", "POST", "OPTIONS"],
        }
    })

    # Register blueprints
    from .admin import bp as admin_bp
    app.register_blueprint(admin_bp)

    # Register error handlers
    @app.errorhandler(404)
    def not_found_error(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def internal_error(error):
        return {'error': 'Internal server error'}, 500

    return app
