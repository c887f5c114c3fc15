"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with the service container, blueprints and error
handlers.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from realm_services.config import AppConfig, load_settings
from realm_services.services import Services, build_services


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, services: Optional[Services] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings (loaded from the environment when omitted)
        services: Pre-built service container (tests inject their own)
    """
    if cfg is None:
        cfg = services.config if services is not None else load_settings()

    app = Flask(__name__)
    app.config.setdefault(
        "OPENAPI_SPEC_PATH",
        str(Path(app.root_path).parent / "openapi" / "realm_services_openapi.yaml"),
    )

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["SECRET_KEY"] = cfg.secret_key

    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    app.extensions["realm_services"] = services or build_services(cfg)

    # Register blueprints
    from realm_services.api import audit, docs, errors, health, selfservice, sms

    app.register_blueprint(health.bp)
    app.register_blueprint(docs.bp)
    app.register_blueprint(selfservice.bp)
    app.register_blueprint(sms.bp)
    app.register_blueprint(audit.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Log startup info
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print("[flask_app] Self-service API registered at /json/selfservice and /json/realms/<realm>/selfservice")
    print(f"[flask_app] SMS API registered at /json/sms (auth={'bearer' if cfg.sms_auth_required else 'open'})")

    if cfg.demo_mode:
        print("[flask_app] WARNING: Demo mode active - do not deploy with demo credentials")

    return app
