import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy.engine import Engine

from seabite.core.config import Config, config as default_config
from seabite.core.dependencies import DependencyContainer, build_container
from seabite.core.exceptions import BaseAPIException
from seabite.db import ping_database
from seabite.routes import cart_bp, location_bp

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None, container: Optional[DependencyContainer] = None) -> Flask:
    """
    Application factory.

    Tests pass their own Config (SQLite URL) or a ready container; each call
    gets an isolated Flask instance with its own session registry.
    """
    config = config or default_config
    config.validate()

    logging.basicConfig(
        level=getattr(logging, config.app.log_level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug
    app.extensions["seabite"] = container or build_container(config)

    # ------------------------------------------------------------------ #
    # Blueprints                                                          #
    # ------------------------------------------------------------------ #
    app.register_blueprint(cart_bp, url_prefix="/api/v1/cart")
    app.register_blueprint(location_bp, url_prefix="/api/v1/location")

    # ------------------------------------------------------------------ #
    # Error handlers: consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e: BaseAPIException):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": {"code": "NOT_FOUND", "message": str(e.description), "details": {}}}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": {"code": "METHOD_NOT_ALLOWED", "message": str(e.description), "details": {}}}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"success": False, "error": {"code": "INTERNAL_ERROR", "message": "An internal server error occurred.", "details": {}}}), 500

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if DB is unreachable."""
        result = ping_database(app.extensions["seabite"].get(Engine))
        if result.ok:
            return jsonify({
                "status": "ok",
                "database": "reachable",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        return jsonify({"status": "error", "database": result.error}), 503

    return app


if __name__ == "__main__":
    cfg = default_config
    application = create_app(cfg)
    application.run(debug=cfg.app.debug, host=cfg.app.host, port=cfg.app.port)
