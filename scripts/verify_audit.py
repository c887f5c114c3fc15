"""Verify the signatures of the legacy audit trail.

Usage:
    python scripts/verify_audit.py [--dir .runtime/audit]

The signing key is read the same way the application reads it
(``AUDIT_LOG_SIGNING_KEY`` or /run/secrets/audit_log_signing_key, demo key
in demo mode). Exits 1 when any event lacks a valid signature.
"""
from __future__ import annotations
import argparse
import os
import sys

from realm_services.config.settings import _load_secret_from_file
from realm_services.core.audit import JsonlAuditSink


def _signing_key() -> str:
    key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY")
    if key:
        return key
    if os.environ.get("DEMO_MODE", "false").lower() == "true":
        return os.environ.get("AUDIT_LOG_SIGNING_KEY_DEMO", "demo-audit-signing-key-change-in-production")
    return ""


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Verify signed audit events")
    parser.add_argument("--dir", default=os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"),
                        help="Audit log directory")
    args = parser.parse_args(argv)

    key = _signing_key()
    if not key:
        print("No audit signing key configured", file=sys.stderr)
        return 2

    total, valid = JsonlAuditSink(args.dir, key).verify()
    print(f"Audit log: {valid}/{total} events with valid signatures")
    return 0 if total == valid else 1


if __name__ == "__main__":
    sys.exit(main())
