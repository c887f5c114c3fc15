"""SMS configuration collection endpoints.

Routes (``<collection>`` is a registered collection name):
    GET    /json/sms/<collection>?_queryFilter=true     query
    POST   /json/sms/<collection>?_action=create        create (id from ``_newResourceId``, ``_id`` or ``name``)
    POST   /json/sms/<collection>?_action=template      schema defaults
    PUT    /json/sms/<collection>/<id>                  update, or create with If-None-Match: *
    GET    /json/sms/<collection>/<id>                  read
    DELETE /json/sms/<collection>/<id>                  delete
    PATCH  /json/sms/<collection>/<id>                  not supported
    POST   /json/sms/<collection>/<id>?_action=<name>   not supported

The realm for ORGANIZATION collections comes from the ``realm`` query
parameter or the ``X-Realm`` header. Sub-configuration parents are named
by query parameters matching the collection's URI template.
"""
from __future__ import annotations

from flask import Blueprint, jsonify, request, url_for

from realm_services.core.exceptions import BadRequestError, NotFoundError
from realm_services.core.resources import (
    ActionRequest,
    CreateRequest,
    DeleteRequest,
    PatchRequest,
    QueryRequest,
    ReadRequest,
    UpdateRequest,
)
from realm_services.core.sms import SmsCollectionProvider
from realm_services.services import current_services
from .context import json_body, request_context
from .decorators import require_admin_token

bp = Blueprint("sms", __name__, url_prefix="/json/sms")


def _provider(collection: str) -> SmsCollectionProvider:
    provider = current_services().sms_collections.get(collection)
    if provider is None:
        raise NotFoundError(f"Unknown SMS collection: {collection}")
    return provider


def _context():
    # Query parameters double as URI template variables (instance and parent names)
    return request_context(**request.args.to_dict())


def _int_arg(name: str) -> int:
    raw = request.args.get(name, "0")
    try:
        return int(raw)
    except ValueError:
        raise BadRequestError(f"{name} must be an integer")


def _created(collection: str, resource):
    response = jsonify(resource.to_dict())
    response.status_code = 201
    response.headers["Location"] = url_for(
        "sms.read_instance", collection=collection, resource_id=resource.id, _external=True
    )
    return response


@bp.route("/<collection>", methods=["GET"])
@require_admin_token
def query_collection(collection: str):
    query = QueryRequest(
        query_filter=request.args.get("_queryFilter", ""),
        paged_results_cookie=request.args.get("_pagedResultsCookie"),
        paged_results_offset=_int_arg("_pagedResultsOffset"),
        page_size=_int_arg("_pageSize"),
    )
    result = _provider(collection).query_collection(_context(), query)
    return jsonify(result.to_dict()), 200


@bp.route("/<collection>", methods=["POST"])
@require_admin_token
def collection_action(collection: str):
    provider = _provider(collection)
    action_name = request.args.get("_action")
    if not action_name:
        raise BadRequestError("_action parameter is required")

    content = json_body()
    if action_name == "create":
        new_id = request.args.get("_newResourceId") or content.pop("_id", None)
        resource = provider.create_instance(_context(), CreateRequest(content, new_resource_id=new_id))
        return _created(collection, resource)

    response = provider.action_collection(_context(), ActionRequest(action_name, content=content))
    return jsonify(response.to_dict()), 200


@bp.route("/<collection>/<resource_id>", methods=["GET"])
@require_admin_token
def read_instance(collection: str, resource_id: str):
    resource = _provider(collection).read_instance(_context(), resource_id, ReadRequest(resource_id))
    return jsonify(resource.to_dict()), 200


@bp.route("/<collection>/<resource_id>", methods=["PUT"])
@require_admin_token
def put_instance(collection: str, resource_id: str):
    provider = _provider(collection)
    content = json_body()
    if request.headers.get("If-None-Match") == "*":
        resource = provider.create_instance(_context(), CreateRequest(content, new_resource_id=resource_id))
        return _created(collection, resource)

    update = UpdateRequest(content, resource_path=resource_id, revision=request.headers.get("If-Match"))
    resource = provider.update_instance(_context(), resource_id, update)
    return jsonify(resource.to_dict()), 200


@bp.route("/<collection>/<resource_id>", methods=["DELETE"])
@require_admin_token
def delete_instance(collection: str, resource_id: str):
    delete = DeleteRequest(resource_path=resource_id, revision=request.headers.get("If-Match"))
    resource = _provider(collection).delete_instance(_context(), resource_id, delete)
    return jsonify(resource.to_dict()), 200


@bp.route("/<collection>/<resource_id>", methods=["PATCH"])
@require_admin_token
def patch_instance(collection: str, resource_id: str):
    operations = request.get_json(silent=True) or []
    patch = PatchRequest(operations if isinstance(operations, list) else [], resource_path=resource_id)
    resource = _provider(collection).patch_instance(_context(), resource_id, patch)
    return jsonify(resource.to_dict()), 200


@bp.route("/<collection>/<resource_id>", methods=["POST"])
@require_admin_token
def instance_action(collection: str, resource_id: str):
    action_name = request.args.get("_action", "")
    action_request = ActionRequest(action_name, resource_path=resource_id, content=json_body())
    response = _provider(collection).action_instance(_context(), resource_id, action_request)
    return jsonify(response.to_dict()), 200
