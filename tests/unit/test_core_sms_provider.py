"""Tests for the SMS collection provider."""
import pytest

from realm_services.core.exceptions import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    NotSupportedError,
)
from realm_services.core.resources import (
    ActionRequest,
    CreateRequest,
    DeleteRequest,
    PatchRequest,
    QueryRequest,
    ReadRequest,
    RequestContext,
    UpdateRequest,
)
from realm_services.core.sms import (
    AttributeSchema,
    ConfigStore,
    SchemaType,
    ServiceConfigManager,
    ServiceSchema,
    SmsCollectionProvider,
    SmsJsonConverter,
    seed_store,
)
from realm_services.services import dashboard_schemas, selfservice_schema

ROOT = RequestContext(realm="/")


@pytest.fixture()
def store():
    return seed_store(ConfigStore(), [
        ("dashboard", None, {"assignedDashboard": set()}),
        ("selfService", "/", {"forgottenPasswordEnabled": {"true"}}),
    ])


@pytest.fixture()
def instances(store):
    dashboard, instances_schema = dashboard_schemas()
    return SmsCollectionProvider(
        SmsJsonConverter(instances_schema), dashboard, SchemaType.GLOBAL, [instances_schema],
        "dashboard/instances", False, store,
    )


@pytest.fixture()
def realm_configs(store):
    schema = selfservice_schema()
    return SmsCollectionProvider(
        SmsJsonConverter(schema), schema, SchemaType.ORGANIZATION, [], "selfService", False, store,
    )


@pytest.fixture()
def clients(store):
    """Two-level path: providers/{providers}/clients below the global social config."""
    service = ServiceSchema("social", "social", [])
    providers = ServiceSchema("providers", "social", [AttributeSchema("issuer")])
    clients_schema = ServiceSchema("clients", "social", [AttributeSchema("clientId")])
    root = ServiceConfigManager(store, "social").create_global_config({})
    root.add_sub_config("google", "providers", {"issuer": {"https://accounts.google.com"}})
    return SmsCollectionProvider(
        SmsJsonConverter(clients_schema), service, SchemaType.GLOBAL, [providers, clients_schema],
        "social/providers/{providers}/clients", False, store,
    )


def test_unsupported_schema_type_rejected(store):
    schema = selfservice_schema()
    with pytest.raises(ValueError):
        SmsCollectionProvider(SmsJsonConverter(schema), schema, SchemaType.USER, [], "x", False, store)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-configuration collection
# ─────────────────────────────────────────────────────────────────────────────
def test_create_read_query_delete_sub_config(instances):
    created = instances.create_instance(ROOT, CreateRequest({"name": "google", "displayName": "Google"}))

    assert created.id == "google"
    assert created.content["displayName"] == "Google"
    assert created.content["name"] == "google"

    read = instances.read_instance(ROOT, "google", ReadRequest())
    assert read.content == created.content
    assert read.revision == created.revision

    result = instances.query_collection(ROOT, QueryRequest())
    assert [resource.id for resource in result.resources] == ["google"]

    deleted = instances.delete_instance(ROOT, "google", DeleteRequest())
    assert deleted.id == "google"
    assert deleted.revision == "0"
    assert deleted.content == {"success": True}
    assert instances.query_collection(ROOT, QueryRequest()).resources == []


def test_create_uses_resource_id_when_name_absent(instances):
    created = instances.create_instance(ROOT, CreateRequest({"displayName": "Mail"}, new_resource_id="mail"))
    assert created.id == "mail"


def test_create_name_and_id_mismatch_is_bad_request(instances):
    with pytest.raises(BadRequestError) as exc:
        instances.create_instance(ROOT, CreateRequest({"name": "a"}, new_resource_id="b"))

    assert exc.value.message == "name and URI's resource ID do not match"
    assert instances.query_collection(ROOT, QueryRequest()).resources == []


def test_create_duplicate_is_internal_error(instances):
    instances.create_instance(ROOT, CreateRequest({"name": "google"}))

    with pytest.raises(InternalServerError) as exc:
        instances.create_instance(ROOT, CreateRequest({"name": "google"}))
    assert exc.value.message.startswith("Unable to create SMS config")


def test_update_sub_config(instances):
    instances.create_instance(ROOT, CreateRequest({"name": "google", "displayName": "Google"}))

    updated = instances.update_instance(ROOT, "google", UpdateRequest({"displayName": "Google Mail"}))

    assert updated.content["displayName"] == "Google Mail"
    assert instances.read_instance(ROOT, "google", ReadRequest()).content["displayName"] == "Google Mail"


def test_read_missing_sub_config_is_not_found(instances):
    with pytest.raises(NotFoundError):
        instances.read_instance(ROOT, "missing", ReadRequest())


def test_delete_missing_sub_config_is_not_found(instances):
    with pytest.raises(NotFoundError):
        instances.delete_instance(ROOT, "missing", DeleteRequest())


def test_query_sorted_by_name(instances):
    for name in ("zeta", "alpha", "mid"):
        instances.create_instance(ROOT, CreateRequest({"name": name}))

    result = instances.query_collection(ROOT, QueryRequest())

    assert [resource.id for resource in result.resources] == ["alpha", "mid", "zeta"]
    assert result.to_dict()["resultCount"] == 3
    assert result.to_dict()["remainingPagedResults"] == -1


def test_query_filter_other_than_true_not_supported(instances):
    with pytest.raises(NotSupportedError) as exc:
        instances.query_collection(ROOT, QueryRequest(query_filter='name eq "google"'))
    assert exc.value.message == 'Query not supported: name eq "google"'


@pytest.mark.parametrize("query", [
    QueryRequest(paged_results_cookie="abc"),
    QueryRequest(paged_results_offset=1),
    QueryRequest(page_size=10),
])
def test_query_paging_not_supported(instances, query):
    with pytest.raises(NotSupportedError) as exc:
        instances.query_collection(ROOT, query)
    assert exc.value.message == "Query paging not currently supported"


def test_template_returns_defaults(instances):
    response = instances.action_collection(ROOT, ActionRequest("template"))

    assert response.content["icon"] == "images/logos/generic.png"
    assert response.content["displayName"] is None


def test_other_collection_action_not_supported(instances):
    with pytest.raises(NotSupportedError):
        instances.action_collection(ROOT, ActionRequest("schema"))


def test_instance_action_and_patch_not_supported(instances):
    with pytest.raises(NotSupportedError):
        instances.action_instance(ROOT, "google", ActionRequest("reset"))
    with pytest.raises(NotSupportedError):
        instances.patch_instance(ROOT, "google", PatchRequest())


def test_missing_root_config_is_not_found():
    dashboard, instances_schema = dashboard_schemas()
    provider = SmsCollectionProvider(
        SmsJsonConverter(instances_schema), dashboard, SchemaType.GLOBAL, [instances_schema],
        "dashboard/instances", False, ConfigStore(),
    )
    with pytest.raises(NotFoundError):
        provider.query_collection(ROOT, QueryRequest())


# ─────────────────────────────────────────────────────────────────────────────
# Nested path resolved through URI parameters
# ─────────────────────────────────────────────────────────────────────────────
def test_nested_collection_uses_uri_parameter(clients):
    context = RequestContext(realm="/", uri_params={"providers": "google"})

    clients.create_instance(context, CreateRequest({"clientId": "abc"}, new_resource_id="web"))

    result = clients.query_collection(context, QueryRequest())
    assert [resource.id for resource in result.resources] == ["web"]
    assert result.resources[0].content == {"clientId": "abc", "name": "web"}


def test_nested_collection_unknown_parent_is_not_found(clients):
    context = RequestContext(realm="/", uri_params={"providers": "facebook"})

    with pytest.raises(NotFoundError) as exc:
        clients.query_collection(context, QueryRequest())
    assert exc.value.message == "Could not find sub config: facebook"


def test_nested_path_without_template_uses_schema_name(store):
    service = ServiceSchema("mail", "mail", [])
    settings = ServiceSchema("settings", "mail", [])
    servers = ServiceSchema("servers", "mail", [AttributeSchema("host")])
    root = ServiceConfigManager(store, "mail").create_global_config({})
    root.add_sub_config("settings", "settings", {})
    provider = SmsCollectionProvider(
        SmsJsonConverter(servers), service, SchemaType.GLOBAL, [settings, servers],
        "mail/settings/servers", False, store,
    )

    created = provider.create_instance(ROOT, CreateRequest({"name": "smtp", "host": "mail.local"}))

    assert created.id == "smtp"
    assert root.get_sub_config("settings").get_sub_config("smtp") is not None


# ─────────────────────────────────────────────────────────────────────────────
# Organization (realm) configuration
# ─────────────────────────────────────────────────────────────────────────────
def test_read_realm_config(realm_configs):
    resource = realm_configs.read_instance(ROOT, "default", ReadRequest())

    assert resource.content["forgottenPasswordEnabled"] is True
    assert resource.content["name"] == "default"


def test_create_realm_config_in_sub_realm(realm_configs, store):
    context = RequestContext(realm="/sub")

    created = realm_configs.create_instance(context, CreateRequest({"userRegistrationEnabled": True}))

    assert created.id == "default"
    config = ServiceConfigManager(store, "selfService").get_organization_config("/sub")
    attrs = config.get_attributes()
    assert attrs["userRegistrationEnabled"] == {"true"}
    assert attrs["forgottenPasswordEnabled"] == {"false"}


def test_update_realm_config_notifies_store(realm_configs, store):
    seen = []
    store.add_listener(lambda service, realm: seen.append((service, realm)))

    realm_configs.update_instance(ROOT, "default", UpdateRequest({"forgottenPasswordEnabled": False}))

    assert seen == [("selfService", "/")]


def test_read_realm_config_missing_is_not_found(realm_configs):
    with pytest.raises(NotFoundError):
        realm_configs.read_instance(RequestContext(realm="/other"), "default", ReadRequest())


def test_delete_realm_config(realm_configs, store):
    realm_configs.delete_instance(ROOT, "default", DeleteRequest())
    assert ServiceConfigManager(store, "selfService").get_organization_config("/") is None


def test_update_rejects_unknown_attribute(realm_configs):
    with pytest.raises(BadRequestError):
        realm_configs.update_instance(ROOT, "default", UpdateRequest({"unknown": 1}))
