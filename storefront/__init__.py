from __future__ import annotations

import os
from typing import Any, Dict

from flask import Flask, current_app, jsonify, g, request

from storefront.config import Config
from storefront.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
    cache,
)
from storefront.logging_config import configure_logging
from storefront.security import apply_security_headers
from storefront.models import Category, User  # ensure models imported for migrations


def create_app(config_overrides: Dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging()

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    cache.init_app(app)

    # Rate limiter (in-memory for dev). Strict on admin writes
    limiter.init_app(app)

    # Sessions are established by the auth service; we only resolve the user
    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        try:
            from storefront.utils.db_retry import safe_db_operation
            return safe_db_operation(db.session.get, User, int(user_id))
        except Exception as e:
            current_app.logger.error(f"Error loading user {user_id}: {str(e)}")
            return None

    # Request context enrichment for logging
    @app.before_request
    def add_request_context() -> None:
        g.request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()

    # Security headers
    @app.after_request
    def set_headers(resp):
        return apply_security_headers(resp)

    # Blueprints
    from storefront.blueprints.admin import bp as admin_bp
    from storefront.blueprints.shop import bp as shop_bp

    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(shop_bp)

    # CLI
    from storefront.cli import categories_cli, create_admin

    app.cli.add_command(categories_cli)
    app.cli.add_command(create_admin)

    # Health route
    @app.get("/health")
    def health():
        try:
            db.session.execute(db.text("SELECT 1"))
            db_ok = "connected"
        except Exception:
            db_ok = "error"
        return jsonify({"status": "ok", "db": db_ok}), 200

    # Error handlers (JSON)
    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "bad_request", "message": str(e)}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({"error": "unauthorized", "message": "login required"}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "forbidden", "message": str(e)}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found", "message": "resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "method_not_allowed", "message": str(e)}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "rate_limited", "message": "too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "server_error", "message": "internal server error"}), 500

    return app
