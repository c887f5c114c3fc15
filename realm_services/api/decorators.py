"""
Flask decorators for administrative endpoints.

Administrative APIs (SMS configuration, legacy audit intake) are protected by
a static Bearer token (RFC 6750 header format) compared in constant time.
In demo mode without a configured token the check is skipped.
"""

import hashlib
import hmac
import logging
from functools import wraps

from flask import g, jsonify, request

from realm_services.services import current_services

logger = logging.getLogger(__name__)


def _unauthorized(message: str):
    response = jsonify({"code": 401, "reason": "Unauthorized", "message": message})
    response.status_code = 401
    response.headers["WWW-Authenticate"] = "Bearer"
    return response


def _log_auth_attempt(token: str, success: bool) -> None:
    """Log authentication attempt without leaking secrets.

    Only a truncated SHA256 of the token is logged.
    """
    token_hash = hashlib.sha256(token.encode()).hexdigest()[:12]
    correlation_id = request.headers.get("X-Correlation-Id", "none")
    client_ip = request.headers.get("X-Forwarded-For", request.remote_addr)

    status = "SUCCESS" if success else "FAILED"
    logger.info(
        f"{status} admin auth | token_hash={token_hash} | path={request.path} | "
        f"correlation_id={correlation_id} | client_ip={client_ip}"
    )


def require_admin_token(f):
    """Require ``Authorization: Bearer <SMS_ADMIN_TOKEN>``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        cfg = current_services().config
        if not cfg.sms_auth_required:
            g.auth_method = "none"
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            return _unauthorized("Authorization header missing. Provide 'Authorization: Bearer <token>'.")
        if not auth_header.startswith("Bearer "):
            return _unauthorized("Authorization header must use Bearer token scheme.")

        token = auth_header[7:].strip()
        if not token:
            return _unauthorized("Bearer token is empty.")

        # Constant-time comparison (timing-attack safe)
        valid = bool(cfg.sms_admin_token) and hmac.compare_digest(token, cfg.sms_admin_token)
        _log_auth_attempt(token, success=valid)
        if not valid:
            return _unauthorized("Invalid token.")

        g.auth_method = "static"
        return f(*args, **kwargs)

    return decorated_function
