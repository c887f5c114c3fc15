"""Pytest shared fixtures."""
import os
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest

from realm_services.config.settings import AppConfig
from realm_services.core.audit import MemoryAuditSink
from realm_services.core.selfservice import SELFSERVICE_SERVICE
from realm_services.core.sms import ConfigStore, seed_store
from realm_services.flask_app import create_app
from realm_services.services import DASHBOARD_SERVICE, build_services

ADMIN_TOKEN = "test-sms-admin-token"


def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=True,
        secret_key="test-secret-key",
        sms_admin_token="",
        selfservice_token_secret="test-selfservice-token-secret",
        audit_enabled=True,
        audit_topics=["authentication", "activity"],
        audit_excluded_realms=[],
        audit_log_dir="",
        audit_log_signing_key="test-signing-key",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def store():
    """Config tree with self-service enabled for the root realm and /sub."""
    config_store = ConfigStore()
    seed_store(config_store, [
        (SELFSERVICE_SERVICE, "/", {
            "forgottenPasswordEnabled": {"true"},
            "forgottenUsernameEnabled": {"true"},
            "userRegistrationEnabled": {"false"},
        }),
        (SELFSERVICE_SERVICE, "/sub", {
            "forgottenPasswordEnabled": {"true"},
            "forgottenPasswordStages": {"userQuery,resetStage"},
        }),
        (DASHBOARD_SERVICE, None, {"assignedDashboard": set()}),
    ])
    return config_store


@pytest.fixture()
def audit_sink():
    return MemoryAuditSink()


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def _client_for(cfg, store, audit_sink):
    services = build_services(cfg, store=store, audit_sink=audit_sink)
    flask_app = create_app(cfg, services)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def app(store, audit_sink):
    return _client_for(make_config(), store, audit_sink)


@pytest.fixture()
def client(app):
    """Flask test client (demo mode, open SMS endpoints)."""
    with app.test_client() as client:
        with app.app_context():
            yield client


@pytest.fixture()
def secured_client(store, audit_sink):
    """Flask test client in production mode (SMS endpoints need the admin token)."""
    flask_app = _client_for(make_config(demo_mode=False, sms_admin_token=ADMIN_TOKEN), store, audit_sink)
    with flask_app.test_client() as client:
        yield client


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture()
def config_factory():
    return make_config
