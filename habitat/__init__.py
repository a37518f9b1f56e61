"""habitat application factory and bootstrap."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from flask import Flask

from habitat.config import REQUIRED_SECRETS, config_by_name
from habitat.extensions import init_extensions


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the habitat Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    if app.config.get("ENV") == "production":
        missing = [name for name in REQUIRED_SECRETS if not app.config.get(name)]
        if missing:
            raise RuntimeError(f"missing required secrets: {', '.join(missing)}")
        store_uri = app.config.get("REVOCATION_STORE_URI") or ""
        if not store_uri or store_uri.startswith("memory://"):
            # Refresh tokens must be visible to every worker process.
            raise RuntimeError("REDIS_URL must point at a shared revocation store in production")

    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if db_uri and db_uri.startswith("sqlite:///"):
        db_path = db_uri.replace("sqlite:///", "", 1)
        abs_path = project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_jwt_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from habitat.core.admin.controllers import admin_api_bp
    from habitat.core.auth.controllers import auth_bp
    from habitat.core.location.controllers import location_api_bp
    from habitat.core.notifications.controllers import notifications_api_bp
    from habitat.core.users.controllers import user_api_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(location_api_bp, url_prefix="/api/location")
    app.register_blueprint(notifications_api_bp, url_prefix="/api/notifications")
    app.register_blueprint(admin_api_bp, url_prefix="/api/admin")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    from habitat.core.errors import HabitatError, status_for

    @app.errorhandler(HabitatError)
    def _domain_error(exc: HabitatError):
        return {"ok": False, "error": exc.code, "message": str(exc)}, status_for(exc)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_jwt_handlers(app: Flask) -> None:
    """Uniform JSON bodies for flask-jwt-extended failures."""
    from habitat.extensions import jwt

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return {"ok": False, "error": "unauthorized", "message": reason}, 401

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return {"ok": False, "error": "unauthorized", "message": reason}, 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return {"ok": False, "error": "token_expired", "message": "access token expired"}, 401
