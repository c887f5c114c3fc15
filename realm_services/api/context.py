"""Translation of Flask requests into core request contexts."""
from __future__ import annotations
from typing import Any, Dict, Optional

from flask import request
from werkzeug.exceptions import BadRequest

from realm_services.core.exceptions import BadRequestError
from realm_services.core.resources import RequestContext


def request_context(realm: Optional[str] = None, **uri_params: str) -> RequestContext:
    """Build a RequestContext for the current request.

    Realm precedence: URL path segment, ``realm`` query parameter,
    ``X-Realm`` header, root.
    """
    resolved = realm or request.args.get("realm") or request.headers.get("X-Realm")
    return RequestContext(
        realm=resolved,
        uri_params={key: value for key, value in uri_params.items() if value is not None},
        headers=dict(request.headers),
        parameters=request.args.to_dict(),
    )


def json_body() -> Dict[str, Any]:
    """Request body as a JSON object (empty when absent)."""
    if not request.data:
        return {}
    try:
        payload = request.get_json(force=True)
    except BadRequest:
        raise BadRequestError("Request body is not valid JSON")
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload
