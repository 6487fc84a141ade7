"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask

from .creator import bp as creator_bp
from .merch import bp as merch_bp
from .metadata import bp as metadata_bp
from .shipping import bp as shipping_bp
from .storefront import bp as storefront_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(creator_bp)
    app.register_blueprint(merch_bp)
    app.register_blueprint(shipping_bp)
    app.register_blueprint(storefront_bp)
    app.register_blueprint(metadata_bp)

    @app.get("/")
    def index():
        return "Welcome to ClickCrate Actions API!", 200
