"""Legacy authentication audit intake.

POST /json/audit/legacy with a JSON body::

    {"eventName": "LOGIN_SUCCESS", "eventDescription": "AM-LOGIN-COMPLETED",
     "transactionId": "...", "authentication": "id=alice,ou=user",
     "realm": "/", "time": 1700000000000, "contexts": {...}, "entries": [...]}

Responds ``{"handled": true|false}``; ``false`` means publishing failed.
"""
from __future__ import annotations
import logging

from flask import Blueprint, jsonify

from realm_services.core.exceptions import BadRequestError
from realm_services.services import current_services
from .context import json_body
from .decorators import require_admin_token

bp = Blueprint("audit", __name__, url_prefix="/json/audit")

logger = logging.getLogger(__name__)

STRING_FIELDS = ("eventName", "eventDescription", "transactionId", "authentication", "realm")


def _validate_event(payload: dict) -> None:
    """Reject fields whose JSON type the translator cannot take."""
    for name in STRING_FIELDS:
        value = payload.get(name)
        if value is not None and not isinstance(value, str):
            raise BadRequestError(f"{name} must be a string")

    time = payload.get("time")
    if time is not None and (isinstance(time, bool) or not isinstance(time, int)):
        raise BadRequestError("time must be epoch milliseconds")

    contexts = payload.get("contexts")
    if contexts is not None and not isinstance(contexts, dict):
        raise BadRequestError("contexts must be an object")

    entries = payload.get("entries")
    if entries is not None and not isinstance(entries, list):
        raise BadRequestError("entries must be an array")


@bp.route("/legacy", methods=["POST"])
@require_admin_token
def legacy_event():
    payload = json_body()
    _validate_event(payload)
    auditor = current_services().legacy_auditor

    try:
        handled = auditor.audit(
            payload.get("eventName"),
            payload.get("eventDescription"),
            payload.get("transactionId"),
            payload.get("authentication"),
            payload.get("realm"),
            payload.get("time"),
            payload.get("contexts"),
            payload.get("entries"),
        )
    except ValueError as exc:
        raise BadRequestError(str(exc), exc) from exc

    if not handled:
        logger.warning(f"Legacy audit event not published: {payload.get('eventName')}")
    return jsonify({
        "handled": handled,
        "logout": auditor.is_logout_event(payload.get("eventName")),
    }), 200
