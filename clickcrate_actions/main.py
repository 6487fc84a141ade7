"""Flask application setup and blueprint wiring."""

from __future__ import annotations

import logging
import os

from flask import Flask
from flask_cors import CORS

from clickcrate_actions.database import mongodb_enabled
from clickcrate_actions.errors import register_error_handlers
from clickcrate_actions.routes import register_routes
from clickcrate_actions.utils.actions import ACTIONS_CORS_OPTIONS, register_action_headers

REQUEST_LIMIT_BYTES = 1 * 1024 * 1024  # 1 MB per request


def configure_logging() -> None:
    """Set the root log level from LOG_LEVEL."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> Flask:
    """Configure and return the Flask application instance."""
    configure_logging()

    app = Flask(__name__)
    CORS(app, resources={r"/*": ACTIONS_CORS_OPTIONS})

    app.config["MAX_CONTENT_LENGTH"] = REQUEST_LIMIT_BYTES

    register_action_headers(app)
    register_error_handlers(app)
    register_routes(app)

    # Initialize MongoDB indexes if enabled
    if mongodb_enabled():
        try:
            from clickcrate_actions.services import metaplex_service, pending_product_service

            with app.app_context():
                pending_product_service.create_indexes()
                metaplex_service.create_indexes()
                app.logger.info("MongoDB indexes created successfully")
        except Exception as e:
            app.logger.warning(f"Failed to create MongoDB indexes: {e}")

    return app


app = create_app()
