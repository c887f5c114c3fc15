"""Self-service endpoints (forgotten password, forgotten username, registration).

Routes:
    GET  /json/selfservice/<service>                        read, root realm
    POST /json/selfservice/<service>?_action=<name>         action, root realm
    GET  /json/realms/<realm path>/selfservice/<service>    read, sub realm
    POST /json/realms/<realm path>/selfservice/<service>?_action=<name>

Each feature is served by its own SelfServiceRequestHandler, which caches
one handler per realm.
"""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from realm_services.core.exceptions import BadRequestError, NotFoundError
from realm_services.core.resources import ActionRequest, ReadRequest
from realm_services.services import current_services
from .context import json_body, request_context

bp = Blueprint("selfservice", __name__, url_prefix="/json")


def _dispatcher(service: str):
    dispatcher = current_services().selfservice.get(service)
    if dispatcher is None:
        raise NotFoundError(f"Unknown self-service feature: {service}")
    return dispatcher


@bp.route("/selfservice/<service>", methods=["GET"])
@bp.route("/realms/<path:realm>/selfservice/<service>", methods=["GET"])
def read(service: str, realm: str | None = None):
    """Return the first stage requirements of the realm's process."""
    context = request_context(realm)
    resource = _dispatcher(service).handle_read(context, ReadRequest(resource_path=service))
    return jsonify(resource.to_dict()), 200


@bp.route("/selfservice/<service>", methods=["POST"])
@bp.route("/realms/<path:realm>/selfservice/<service>", methods=["POST"])
def action(service: str, realm: str | None = None):
    """Run an action (``submitRequirements``) against the realm's process."""
    action_name = request.args.get("_action")
    if not action_name:
        raise BadRequestError("_action parameter is required")

    context = request_context(realm)
    action_request = ActionRequest(
        action=action_name,
        resource_path=service,
        content=json_body(),
        parameters=request.args.to_dict(),
    )
    response = _dispatcher(service).handle_action(context, action_request)
    return jsonify(response.to_dict()), 200
