import os
import logging

from flask import Flask, jsonify
from .services.image_store import ImageStore
from .services.config_service import ConfigService
from .generator import MazeGenerator

APP_DIR = os.path.join(os.path.expanduser("~"), ".mazegen")


def create_app(config_overrides=None):
    """
    Creates and configs an instance of the Flask application.
    """
    app = Flask(__name__)
    log = logging.getLogger("mazegen.api")

    # --- Configuration ---
    app.config.from_mapping(
        SECRET_KEY="dev",
        CONFIG_PATH=os.path.join(APP_DIR, "mazegen.cfg"),
        MAX_CONTENT_LENGTH=10 * 1024 * 1024,
    )

    if config_overrides:
        app.config.from_mapping(config_overrides)
        log.info("Applied runtime configuration overrides.")

    # --- Initialize Services ---
    log.info("Initializing application services...")
    try:
        config_dir = os.path.dirname(app.config["CONFIG_PATH"])
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)
        app.config_service = ConfigService(app.config["CONFIG_PATH"])
        app.image_store = ImageStore()
        app.maze_generator = MazeGenerator(
            app.image_store, limits=app.config_service.get_limits()
        )
        log.info("All services initialized successfully.")
    except Exception as e:
        log.error("Failed to initialize services: %s", e, exc_info=True)
        raise

    # --- Register Blueprints (APIs) ---
    log.info("Registering API blueprints...")
    from .api import images, maze, debug

    app.register_blueprint(images.bp, url_prefix="/api/images")
    app.register_blueprint(maze.bp, url_prefix="/api/maze")
    app.register_blueprint(debug.bp, url_prefix="/api/debug")
    log.info("All API blueprints registered.")

    # --- Global Error Handler ---
    @app.errorhandler(Exception)
    def handle_exception(e):
        """Catches all unhandled exceptions, logs them, and returns JSON."""
        if hasattr(e, "code") and isinstance(e.code, int) and e.code < 500:
            return jsonify(error=str(e)), e.code
        log.error("An unhandled exception occurred: %s", e, exc_info=True)
        return jsonify(error="An internal server error occurred."), 500

    @app.route("/health")
    def health_check():
        return "OK"

    return app
