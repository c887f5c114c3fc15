"""Service container wiring the core components together.

One container is built per Flask application (``create_app``) and stored in
``app.extensions["realm_services"]``; request handlers reach it through
``current_services()``. Nothing here is module-level state.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from realm_services.config.settings import AppConfig
from realm_services.core.audit import (
    ActivityAuditor,
    AuditConfig,
    AuthenticationAuditor,
    JsonlAuditSink,
    LegacyAuthenticationEventAuditor,
)
from realm_services.core.audit.sink import AuditSink
from realm_services.core.selfservice import (
    EXTRACTORS,
    SELFSERVICE_SERVICE,
    ConsoleConfigHandler,
    ProcessServiceProvider,
    SelfServiceRequestHandler,
    ServiceProviderFactory,
)
from realm_services.core.sms import (
    AttributeSchema,
    ConfigStore,
    SchemaType,
    ServiceSchema,
    SmsCollectionProvider,
    SmsJsonConverter,
    seed_store,
)

logger = logging.getLogger(__name__)

DASHBOARD_SERVICE = "dashboard"


def selfservice_schema() -> ServiceSchema:
    """Organization schema of the self-service console settings."""
    attributes = []
    for prefix, extractor in EXTRACTORS.items():
        attributes.extend([
            AttributeSchema(f"{prefix}Enabled", "boolean", default=("false",)),
            AttributeSchema(f"{prefix}Stages", "string", default=(",".join(extractor.default_stages),)),
            AttributeSchema(f"{prefix}TokenLifetime", "number", default=("900",)),
        ])
    return ServiceSchema(SELFSERVICE_SERVICE, SELFSERVICE_SERVICE, attributes)


def dashboard_schemas() -> tuple[ServiceSchema, ServiceSchema]:
    """Global dashboard service and its ``instances`` sub-schema."""
    service = ServiceSchema(DASHBOARD_SERVICE, DASHBOARD_SERVICE, [
        AttributeSchema("assignedDashboard", multi_valued=True),
    ])
    instances = ServiceSchema("instances", DASHBOARD_SERVICE, [
        AttributeSchema("className"),
        AttributeSchema("displayName"),
        AttributeSchema("icon", default=("images/logos/generic.png",)),
        AttributeSchema("login"),
    ])
    return service, instances


@dataclass
class Services:
    config: AppConfig
    store: ConfigStore
    console_config_handler: ConsoleConfigHandler
    selfservice: Dict[str, SelfServiceRequestHandler] = field(default_factory=dict)
    sms_collections: Dict[str, SmsCollectionProvider] = field(default_factory=dict)
    legacy_auditor: Optional[LegacyAuthenticationEventAuditor] = None


def build_services(cfg: AppConfig, store: Optional[ConfigStore] = None,
                   audit_sink: Optional[AuditSink] = None) -> Services:
    """Build the container from settings.

    Args:
        cfg: Application settings
        store: Configuration tree (a fresh one is created and, in demo mode,
            seeded with enabled self-service for the root realm)
        audit_sink: Audit sink (defaults to the signed JSONL trail)
    """
    if store is None:
        store = ConfigStore()
        if cfg.demo_mode:
            seed_store(store, [
                (SELFSERVICE_SERVICE, "/", {
                    "forgottenPasswordEnabled": {"true"},
                    "forgottenUsernameEnabled": {"true"},
                    "userRegistrationEnabled": {"false"},
                }),
                (DASHBOARD_SERVICE, None, {"assignedDashboard": set()}),
            ])

    console_config_handler = ConsoleConfigHandler(store)
    provider_factory = ServiceProviderFactory(ProcessServiceProvider(cfg.selfservice_token_secret))
    services = Services(cfg, store, console_config_handler)

    for name, extractor in EXTRACTORS.items():
        services.selfservice[name] = SelfServiceRequestHandler(console_config_handler, extractor, provider_factory)

    selfservice = selfservice_schema()
    services.sms_collections[SELFSERVICE_SERVICE] = SmsCollectionProvider(
        SmsJsonConverter(selfservice), selfservice, SchemaType.ORGANIZATION, [],
        SELFSERVICE_SERVICE, False, store,
    )
    dashboard, instances = dashboard_schemas()
    services.sms_collections["dashboard-instances"] = SmsCollectionProvider(
        SmsJsonConverter(instances), dashboard, SchemaType.GLOBAL, [instances],
        "dashboard/instances", False, store,
    )

    audit_config = AuditConfig(
        enabled=cfg.audit_enabled,
        topics=frozenset(cfg.audit_topics),
        excluded_realms=frozenset(cfg.audit_excluded_realms),
    )
    sink = audit_sink or JsonlAuditSink(Path(cfg.audit_log_dir), cfg.audit_log_signing_key)
    services.legacy_auditor = LegacyAuthenticationEventAuditor(
        AuthenticationAuditor(sink, audit_config),
        ActivityAuditor(sink, audit_config),
    )

    logger.info(
        "Realm services ready | selfservice=%s | sms=%s",
        ",".join(sorted(services.selfservice)),
        ",".join(sorted(services.sms_collections)),
    )
    return services


def current_services() -> Services:
    """Container of the active Flask application."""
    from flask import current_app
    return current_app.extensions["realm_services"]
