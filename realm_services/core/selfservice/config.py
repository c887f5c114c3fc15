"""Console configuration for self-service features.

A realm's self-service settings live in the organization configuration of
the ``selfService`` service. Extractors turn those raw attributes into a
``ConsoleConfig`` for one feature; providers decide from that config whether
the feature is enabled and build its request handler.
"""
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

from ..resources import RequestContext, RequestHandler
from ..sms.config_tree import Attributes, ConfigStore, ServiceConfigManager

logger = logging.getLogger(__name__)

SELFSERVICE_SERVICE = "selfService"
DEFAULT_TOKEN_LIFETIME = 900


@dataclass(frozen=True)
class ConsoleConfig:
    """Realm-specific settings for one self-service feature."""
    service: str
    enabled: bool = False
    stages: Tuple[str, ...] = ()
    token_lifetime: int = DEFAULT_TOKEN_LIFETIME


class ConsoleConfigExtractor:
    """Reads one feature's settings from the self-service attributes.

    Attribute names are derived from the feature prefix, e.g. for
    ``forgottenPassword``: ``forgottenPasswordEnabled``,
    ``forgottenPasswordStages`` and ``forgottenPasswordTokenLifetime``.
    """

    def __init__(self, prefix: str, default_stages: Tuple[str, ...]):
        self.prefix = prefix
        self.default_stages = default_stages

    def extract(self, attrs: Attributes) -> ConsoleConfig:
        enabled = _single(attrs, f"{self.prefix}Enabled", "false").lower() == "true"
        stages_value = _single(attrs, f"{self.prefix}Stages", "")
        stages = tuple(stage.strip() for stage in stages_value.split(",") if stage.strip())
        lifetime = _single(attrs, f"{self.prefix}TokenLifetime", str(DEFAULT_TOKEN_LIFETIME))
        try:
            token_lifetime = int(lifetime)
        except ValueError:
            logger.warning("Invalid %sTokenLifetime '%s', using default", self.prefix, lifetime)
            token_lifetime = DEFAULT_TOKEN_LIFETIME
        return ConsoleConfig(
            service=self.prefix,
            enabled=enabled,
            stages=stages or self.default_stages,
            token_lifetime=token_lifetime,
        )

    def __repr__(self) -> str:
        return f"ConsoleConfigExtractor({self.prefix!r})"


def _single(attrs: Attributes, key: str, default: str) -> str:
    values = attrs.get(key)
    if not values:
        return default
    return sorted(values)[0]


FORGOTTEN_PASSWORD = ConsoleConfigExtractor(
    "forgottenPassword", ("captcha", "userQuery", "emailValidation", "resetStage")
)
FORGOTTEN_USERNAME = ConsoleConfigExtractor(
    "forgottenUsername", ("captcha", "userQuery", "emailUsername")
)
USER_REGISTRATION = ConsoleConfigExtractor(
    "userRegistration", ("captcha", "emailValidation", "userDetails")
)

EXTRACTORS: Dict[str, ConsoleConfigExtractor] = {
    extractor.prefix: extractor
    for extractor in (FORGOTTEN_PASSWORD, FORGOTTEN_USERNAME, USER_REGISTRATION)
}


class ConsoleConfigChangeListener(Protocol):
    def config_update(self, realm: str) -> None:
        ...


class ConsoleConfigHandler:
    """Resolves console configuration and relays realm change notifications."""

    def __init__(self, store: ConfigStore, service_name: str = SELFSERVICE_SERVICE):
        self.store = store
        self.service_name = service_name
        self._listeners: List[ConsoleConfigChangeListener] = []
        self._lock = threading.Lock()
        store.add_listener(self._on_config_change)

    def get_config(self, realm: str, extractor: ConsoleConfigExtractor) -> ConsoleConfig:
        """Fetch the realm's self-service attributes and apply the extractor."""
        config = ServiceConfigManager(self.store, self.service_name).get_organization_config(realm)
        attrs = config.get_attributes() if config is not None else {}
        return extractor.extract(attrs)

    def register_listener(self, listener: ConsoleConfigChangeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def _on_config_change(self, service_name: str, realm: Optional[str]) -> None:
        if service_name != self.service_name or realm is None:
            return
        with self._lock:
            listeners = list(self._listeners)
        logger.debug("Self-service config changed | realm=%s | listeners=%d", realm, len(listeners))
        for listener in listeners:
            try:
                listener.config_update(realm)
            except Exception:
                logger.exception("Console config listener failed | realm=%s", realm)


class ServiceProvider(Protocol):
    """Strategy deciding enablement and building the realm's handler."""

    def is_service_enabled(self, config: ConsoleConfig) -> bool:
        ...

    def get_service(self, config: ConsoleConfig, context: RequestContext, realm: str) -> RequestHandler:
        ...


class ServiceProviderFactory:
    """Selects the provider registered for a console config's feature."""

    def __init__(self, default: ServiceProvider, providers: Optional[Dict[str, ServiceProvider]] = None):
        self.default = default
        self.providers = dict(providers or {})

    def register(self, service: str, provider: ServiceProvider) -> None:
        self.providers[service] = provider

    def get_provider(self, config: ConsoleConfig) -> ServiceProvider:
        return self.providers.get(config.service, self.default)
