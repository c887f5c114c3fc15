"""Collection resource provider for SMS schema configuration.

Maps create/read/update/delete/query onto a service's configuration tree:

    GLOBAL        -> ServiceConfigManager.*_global_config*
    ORGANIZATION  -> ServiceConfigManager.*_organization_config* (realm from context)
    sub path      -> ServiceConfig.*_sub_config* below the resolved parent

Store failures (``SmsError``) are logged and surfaced as
``InternalServerError``; missing entities as ``NotFoundError``.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    NotSupportedError,
)
from ..realm import get_realm
from ..resources import (
    ActionRequest,
    ActionResponse,
    CreateRequest,
    DeleteRequest,
    PatchRequest,
    QueryRequest,
    QueryResponse,
    ReadRequest,
    RequestContext,
    Resource,
    UpdateRequest,
    revision_of,
)
from .config_tree import (
    ConfigStore,
    SchemaType,
    ServiceConfig,
    ServiceConfigManager,
    ServiceSchema,
    SmsError,
)
from .json_converter import SmsJsonConverter

logger = logging.getLogger(__name__)


class SmsResourceProvider:
    """Shared tree navigation for SMS resource providers."""

    def __init__(
        self,
        schema: ServiceSchema,
        schema_type: SchemaType,
        sub_schema_path: Sequence[ServiceSchema],
        uri_path: str,
        service_has_instance_name: bool,
        converter: SmsJsonConverter,
        store: ConfigStore,
    ):
        self.schema = schema
        self.type = schema_type
        self.sub_schema_path: List[ServiceSchema] = list(sub_schema_path)
        self.uri_path = uri_path
        self.service_has_instance_name = service_has_instance_name
        self.converter = converter
        self.store = store

    def realm_for(self, context: RequestContext) -> str:
        return get_realm(context)

    def get_service_config_manager(self, context: RequestContext) -> ServiceConfigManager:
        return ServiceConfigManager(self.store, self.schema.service_name)

    def last_schema_node_name(self) -> str:
        return self.sub_schema_path[-1].name

    @property
    def target_schema(self) -> ServiceSchema:
        return self.sub_schema_path[-1] if self.sub_schema_path else self.schema

    def parent_sub_config_for(self, context: RequestContext, scm: ServiceConfigManager) -> ServiceConfig:
        """Walk from the service instance down to the parent of the collection.

        Path fragments that appear as ``{fragment}`` in the URI path are
        named by the matching URI parameter; others are singleton
        sub-configs named after their schema.
        """
        name = context.uri_params.get("name") if self.service_has_instance_name else None
        if self.type == SchemaType.GLOBAL:
            config = scm.get_global_config(name)
        else:
            config = scm.get_organization_config(self.realm_for(context), name)
        if config is None:
            raise NotFoundError(f"No {self.type.value} configuration for service {self.schema.service_name}")

        for schema in self.sub_schema_path[:-1]:
            fragment = schema.path_fragment
            if "{%s}" % fragment in self.uri_path:
                config = self.checked_instance_sub_config(context.uri_params.get(fragment), config)
            else:
                config = self.checked_instance_sub_config(schema.name, config)
        return config

    def checked_instance_sub_config(self, name: Optional[str], config: ServiceConfig) -> ServiceConfig:
        sub_config = config.get_sub_config(name)
        if sub_config is None:
            raise NotFoundError(f"Could not find sub config: {name}")
        return sub_config

    def _store_failure(self, operation: str, error: SmsError) -> InternalServerError:
        logger.warning("SmsError on %s | service=%s", operation, self.schema.service_name, exc_info=error)
        return InternalServerError(f"Unable to {operation} SMS config: {error}", error)


class SmsCollectionProvider(SmsResourceProvider):
    """Collection provider for GLOBAL and ORGANIZATION schema config."""

    def __init__(
        self,
        converter: SmsJsonConverter,
        schema: ServiceSchema,
        schema_type: SchemaType,
        sub_schema_path: Sequence[ServiceSchema],
        uri_path: str,
        service_has_instance_name: bool,
        store: ConfigStore,
    ):
        super().__init__(schema, schema_type, sub_schema_path, uri_path, service_has_instance_name, converter, store)
        if schema_type not in (SchemaType.GLOBAL, SchemaType.ORGANIZATION):
            raise ValueError(f"Unsupported type: {schema_type}")

    def action_collection(self, context: RequestContext, request: ActionRequest) -> ActionResponse:
        """Only ``template`` is supported: the schema defaults as JSON."""
        if request.action == "template":
            return ActionResponse(self.converter.to_json(self.target_schema.defaults()))
        raise NotSupportedError(f"{request.action} action not supported")

    def create_instance(self, context: RequestContext, request: CreateRequest) -> Resource:
        content = request.content or {}
        attrs = self.target_schema.defaults()
        attrs.update(self.converter.from_json(content))
        try:
            scm = self.get_service_config_manager(context)
            if not self.sub_schema_path:
                instance_name = request.new_resource_id or content.get("name")
                if self.type == SchemaType.GLOBAL:
                    result = scm.create_global_config(attrs, instance_name)
                else:
                    result = scm.create_organization_config(self.realm_for(context), attrs, instance_name)
            else:
                config = self.parent_sub_config_for(context, scm)
                name = content.get("name")
                if name is None:
                    name = request.new_resource_id
                elif request.new_resource_id is not None and name != request.new_resource_id:
                    raise BadRequestError("name and URI's resource ID do not match")
                if not name:
                    raise BadRequestError("A name or resource ID is required")
                config.add_sub_config(name, self.last_schema_node_name(), attrs)
                result = self.checked_instance_sub_config(name, config)
        except SmsError as e:
            raise self._store_failure("create", e) from e

        value = self._json_value(result)
        return Resource(result.component_name, revision_of(value), value)

    def delete_instance(self, context: RequestContext, resource_id: str, request: DeleteRequest) -> Resource:
        try:
            scm = self.get_service_config_manager(context)
            if not self.sub_schema_path:
                if self.type == SchemaType.GLOBAL:
                    self._checked_instance(scm.get_global_config(resource_id), resource_id)
                    scm.remove_global_configuration(resource_id)
                else:
                    realm = self.realm_for(context)
                    self._checked_instance(scm.get_organization_config(realm, resource_id), resource_id)
                    scm.remove_organization_configuration(realm, resource_id)
            else:
                config = self.parent_sub_config_for(context, scm)
                self.checked_instance_sub_config(resource_id, config)
                config.remove_sub_config(resource_id)
        except SmsError as e:
            raise self._store_failure("delete", e) from e

        return Resource(resource_id, "0", {"success": True})

    def read_instance(self, context: RequestContext, resource_id: str, request: ReadRequest) -> Resource:
        try:
            node = self._instance_for(context, resource_id)
        except SmsError as e:
            raise self._store_failure("read", e) from e

        value = self._json_value(node)
        return Resource(resource_id, revision_of(value), value)

    def update_instance(self, context: RequestContext, resource_id: str, request: UpdateRequest) -> Resource:
        attrs = self.converter.from_json(request.content)
        try:
            node = self._instance_for(context, resource_id)
            node.set_attributes(attrs)
        except SmsError as e:
            raise self._store_failure("update", e) from e

        value = self._json_value(node)
        return Resource(resource_id, revision_of(value), value)

    def query_collection(self, context: RequestContext, request: QueryRequest) -> QueryResponse:
        """Return every instance; only the ``true`` filter without paging is accepted."""
        if str(request.query_filter).strip() != "true":
            raise NotSupportedError(f"Query not supported: {request.query_filter}")
        if request.paged_results_cookie is not None or request.paged_results_offset > 0 or request.page_size > 0:
            raise NotSupportedError("Query paging not currently supported")

        resources: List[Resource] = []
        try:
            scm = self.get_service_config_manager(context)
            if not self.sub_schema_path:
                realm = self.realm_for(context) if self.type == SchemaType.ORGANIZATION else None
                for instance_name in sorted(scm.get_instance_names()):
                    if self.type == SchemaType.GLOBAL:
                        config = scm.get_global_config(instance_name)
                    else:
                        config = scm.get_organization_config(realm, instance_name)
                    if config is not None:
                        value = self._json_value(config)
                        resources.append(Resource(instance_name, revision_of(value), value))
            else:
                config = self.parent_sub_config_for(context, scm)
                for config_name in sorted(config.get_sub_config_names("*", self.last_schema_node_name())):
                    sub_config = config.get_sub_config(config_name)
                    if sub_config is None:
                        continue
                    value = self._json_value(sub_config)
                    resources.append(Resource(config_name, revision_of(value), value))
        except SmsError as e:
            raise self._store_failure("query", e) from e

        return QueryResponse(resources)

    def action_instance(self, context: RequestContext, resource_id: str, request: ActionRequest) -> ActionResponse:
        raise NotSupportedError(f"{request.action} action not supported")

    def patch_instance(self, context: RequestContext, resource_id: str, request: PatchRequest) -> Resource:
        raise NotSupportedError("patch operation not supported")

    def _instance_for(self, context: RequestContext, resource_id: str) -> ServiceConfig:
        scm = self.get_service_config_manager(context)
        if not self.sub_schema_path:
            if self.type == SchemaType.GLOBAL:
                return self._checked_instance(scm.get_global_config(resource_id), resource_id)
            return self._checked_instance(
                scm.get_organization_config(self.realm_for(context), resource_id), resource_id
            )
        config = self.parent_sub_config_for(context, scm)
        return self.checked_instance_sub_config(resource_id, config)

    @staticmethod
    def _checked_instance(config: Optional[ServiceConfig], resource_id: str) -> ServiceConfig:
        if config is None:
            raise NotFoundError(f"Configuration '{resource_id}' not found")
        return config

    def _json_value(self, config: ServiceConfig) -> Dict[str, Any]:
        value = self.converter.to_json(config.get_attributes())
        value["name"] = config.component_name
        return value
