"""Request, response and context value types for resource handlers.

Handlers in this package are framework-free: the Flask blueprints in
``realm_services.api`` build these objects from the HTTP request and
render the returned values as JSON.
"""
from __future__ import annotations
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class RequestContext:
    """Inbound request context.

    Attributes:
        realm: Realm path resolved by the routing layer (None for root)
        uri_params: URI template variables (parent sub-config names, instance name)
        headers: Request headers
        parameters: Query parameters
    """
    realm: Optional[str] = None
    uri_params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReadRequest:
    resource_path: str = ""
    fields: List[str] = field(default_factory=list)


@dataclass
class ActionRequest:
    action: str
    resource_path: str = ""
    content: Dict[str, Any] = field(default_factory=dict)
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CreateRequest:
    content: Dict[str, Any]
    new_resource_id: Optional[str] = None
    resource_path: str = ""


@dataclass
class UpdateRequest:
    content: Dict[str, Any]
    resource_path: str = ""
    revision: Optional[str] = None


@dataclass
class DeleteRequest:
    resource_path: str = ""
    revision: Optional[str] = None


@dataclass
class PatchRequest:
    operations: List[Dict[str, Any]] = field(default_factory=list)
    resource_path: str = ""


@dataclass
class QueryRequest:
    """Collection query.

    Only the literal ``true`` filter is understood by the SMS providers;
    paging is rejected.
    """
    query_filter: str = "true"
    paged_results_cookie: Optional[str] = None
    paged_results_offset: int = 0
    page_size: int = 0


def revision_of(content: Dict[str, Any]) -> str:
    """Stable revision digest of a JSON document."""
    canonical = json.dumps(content, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


@dataclass
class Resource:
    id: str
    revision: str
    content: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """JSON body with ``_id`` and ``_rev`` metadata."""
        body = {"_id": self.id, "_rev": self.revision}
        body.update(self.content)
        return body


@dataclass
class ActionResponse:
    content: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.content)


@dataclass
class QueryResponse:
    resources: List[Resource] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": [resource.to_dict() for resource in self.resources],
            "resultCount": len(self.resources),
            "pagedResultsCookie": None,
            "remainingPagedResults": -1,
        }


class RequestHandler(Protocol):
    """Read/action handler for a self-service endpoint."""

    def handle_read(self, context: RequestContext, request: ReadRequest) -> Resource:
        ...

    def handle_action(self, context: RequestContext, request: ActionRequest) -> ActionResponse:
        ...
