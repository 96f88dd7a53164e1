from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from smartsplit.api.routes import api_bp
from smartsplit.config import Config
from smartsplit.logging import configure_logging


def create_app() -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    configure_logging(app.config["LOG_LEVEL"])
    CORS(app)  # the presentation layer is served from another origin

    app.register_blueprint(api_bp)
    return app
