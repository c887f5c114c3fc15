"""Gunicorn configuration file with secret checks.

Secrets are read by ``realm_services.config.settings`` from /run/secrets
(Docker secrets) first, then from environment variables. The post_fork hook
only reports what each worker will find; it never loads secret values
itself, so workers stay consistent with the master's environment.
"""
import os
from pathlib import Path

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
wsgi_app = "realm_services.wsgi:app"

REQUIRED_IN_PRODUCTION = {
    "FLASK_SECRET_KEY": "flask_secret_key",
    "SELFSERVICE_TOKEN_SECRET": "selfservice_token_secret",
    "SMS_ADMIN_TOKEN": "sms_admin_token",
}


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports cached Docker secrets and, outside demo mode, warns about
    required secrets that are neither mounted nor set in the environment
    (settings loading will then refuse to start the worker).
    """
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    secrets_dir = Path("/run/secrets")
    mounted = set()
    if secrets_dir.exists() and secrets_dir.is_dir():
        mounted = {path.name for path in secrets_dir.glob("*")}
        if mounted:
            worker.log.info(f"Found {len(mounted)} secrets in /run/secrets (using cached secrets)")

    if demo_mode:
        worker.log.info("DEMO_MODE=true: missing secrets will be generated per worker")
        return

    for env_name, secret_name in REQUIRED_IN_PRODUCTION.items():
        if secret_name in mounted or os.environ.get(env_name):
            continue
        worker.log.error(f"{env_name} missing (no /run/secrets/{secret_name} and no env var)")
