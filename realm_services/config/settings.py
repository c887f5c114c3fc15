"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Flask
    secret_key: str

    # SMS admin API
    sms_admin_token: str = ""

    # Self-service
    selfservice_token_secret: str = ""

    # Audit
    audit_enabled: bool = True
    audit_topics: list[str] = field(default_factory=lambda: ["authentication", "activity"])
    audit_excluded_realms: list[str] = field(default_factory=list)
    audit_log_dir: str = ".runtime/audit"
    audit_log_signing_key: str = ""

    @property
    def sms_auth_required(self) -> bool:
        """SMS endpoints are open only in demo mode without a configured token."""
        return bool(self.sms_admin_token) or not self.demo_mode


def _get_or_generate(var_name: str, secret_name: str, demo_mode: bool) -> str:
    """Get a secret from /run/secrets or environment, generating one in demo mode."""
    value = _load_secret_from_file(secret_name, var_name)
    if value:
        return value

    if demo_mode:
        value = secrets.token_urlsafe(32)
        os.environ[var_name] = value
        print(f"[demo-mode] Generated temporary {var_name}")
        return value

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _csv(value: Optional[str]) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    secret_key = _get_or_generate("FLASK_SECRET_KEY", "flask_secret_key", demo_mode)
    selfservice_token_secret = _get_or_generate(
        "SELFSERVICE_TOKEN_SECRET", "selfservice_token_secret", demo_mode
    )
    # Optional in demo mode: SMS endpoints stay open when no token is configured
    sms_admin_token = _load_secret_from_file("sms_admin_token", "SMS_ADMIN_TOKEN") or ""
    if not sms_admin_token and not demo_mode:
        raise RuntimeError("SMS_ADMIN_TOKEN is required in production mode.")

    audit_enabled = os.environ.get("AUDIT_ENABLED", "true").lower() == "true"
    audit_topics = _csv(os.environ.get("AUDIT_TOPICS", "authentication,activity"))
    audit_excluded_realms = _csv(os.environ.get("AUDIT_EXCLUDED_REALMS"))
    audit_log_dir = os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")

    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""
    if not audit_log_signing_key and demo_mode:
        audit_log_signing_key = os.environ.get(
            "AUDIT_LOG_SIGNING_KEY_DEMO", "demo-audit-signing-key-change-in-production"
        )
        print(f"[demo-mode] Using demo AUDIT_LOG_SIGNING_KEY: {audit_log_signing_key[:20]}...")

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; audit={'on' if audit_enabled else 'off'}; topics={','.join(audit_topics)}")

    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        secret_key=secret_key,
        sms_admin_token=sms_admin_token,
        selfservice_token_secret=selfservice_token_secret,
        audit_enabled=audit_enabled,
        audit_topics=audit_topics,
        audit_excluded_realms=audit_excluded_realms,
        audit_log_dir=audit_log_dir,
        audit_log_signing_key=audit_log_signing_key,
    )
