"""In-memory hierarchical service configuration tree.

Stands in for the platform's configuration storage. Service configuration
is split into global instances and per-realm (organization) instances;
every node can hold named sub-configurations tagged with the id of the
sub-schema that describes them.

Mutations are serialized by one re-entrant lock per store. Change
listeners are called after the lock is released with
``(service_name, realm)``; ``realm`` is None for global changes.
"""
from __future__ import annotations
import copy
import fnmatch
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..realm import normalize_realm

logger = logging.getLogger(__name__)

Attributes = Dict[str, Set[str]]
ChangeListener = Callable[[str, Optional[str]], None]

DEFAULT_INSTANCE = "default"


class SchemaType(Enum):
    GLOBAL = "global"
    ORGANIZATION = "organization"
    USER = "user"
    DYNAMIC = "dynamic"


class SmsError(Exception):
    """Configuration store operation failed."""
    pass


@dataclass(frozen=True)
class AttributeSchema:
    """Attribute definition: name, value type (string, number, boolean), cardinality."""
    name: str
    type: str = "string"
    multi_valued: bool = False
    default: Tuple[str, ...] = ()


@dataclass
class ServiceSchema:
    """Schema node for a service or one of its sub-configurations.

    Attributes:
        name: Schema id (also the sub-config tag)
        service_name: Owning service
        attributes: Attribute definitions
        resource_name: URI path fragment; falls back to ``name``
    """
    name: str
    service_name: str
    attributes: List[AttributeSchema] = field(default_factory=list)
    resource_name: Optional[str] = None

    @property
    def path_fragment(self) -> str:
        if not self.resource_name or self.resource_name == "USE-PARENT":
            return self.name
        return self.resource_name

    def attribute(self, name: str) -> Optional[AttributeSchema]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def defaults(self) -> Attributes:
        return {attribute.name: set(attribute.default) for attribute in self.attributes}


def _copy_attributes(attrs: Optional[Attributes]) -> Attributes:
    return {key: set(values) for key, values in (attrs or {}).items()}


class ServiceConfig:
    """A node in the configuration tree."""

    def __init__(
        self,
        store: "ConfigStore",
        service_name: str,
        component_name: str,
        schema_id: str,
        attributes: Optional[Attributes] = None,
        realm: Optional[str] = None,
    ):
        self._store = store
        self.service_name = service_name
        self.component_name = component_name
        self.schema_id = schema_id
        self.realm = realm
        self._attributes = _copy_attributes(attributes)
        self._sub_configs: Dict[str, ServiceConfig] = {}

    def get_attributes(self) -> Attributes:
        with self._store.lock:
            return _copy_attributes(self._attributes)

    def set_attributes(self, attrs: Attributes) -> None:
        """Replace the values of the given attributes; others are kept."""
        with self._store.lock:
            for key, values in attrs.items():
                self._attributes[key] = set(values)
        self._store.notify(self.service_name, self.realm)

    def add_sub_config(self, name: str, schema_id: str, attrs: Attributes) -> "ServiceConfig":
        with self._store.lock:
            if name in self._sub_configs:
                raise SmsError(f"Sub configuration '{name}' already exists")
            sub_config = ServiceConfig(
                self._store,
                self.service_name,
                name,
                schema_id,
                attrs,
                realm=self.realm,
            )
            self._sub_configs[name] = sub_config
        self._store.notify(self.service_name, self.realm)
        return sub_config

    def get_sub_config(self, name: Optional[str]) -> Optional["ServiceConfig"]:
        if name is None:
            return None
        with self._store.lock:
            return self._sub_configs.get(name)

    def get_sub_config_names(self, pattern: str = "*", schema_id: Optional[str] = None) -> Set[str]:
        with self._store.lock:
            return {
                name
                for name, sub_config in self._sub_configs.items()
                if fnmatch.fnmatchcase(name, pattern)
                and (schema_id is None or sub_config.schema_id == schema_id)
            }

    def remove_sub_config(self, name: str) -> None:
        with self._store.lock:
            removed = self._sub_configs.pop(name, None)
        if removed is not None:
            self._store.notify(self.service_name, self.realm)

    def __repr__(self) -> str:
        return f"ServiceConfig(service={self.service_name!r}, name={self.component_name!r}, realm={self.realm!r})"


class ConfigStore:
    """Root of the configuration tree with change notification."""

    def __init__(self):
        self.lock = threading.RLock()
        self._global: Dict[str, Dict[str, ServiceConfig]] = {}
        self._organization: Dict[Tuple[str, str], Dict[str, ServiceConfig]] = {}
        self._listeners: List[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        with self.lock:
            self._listeners.append(listener)

    def notify(self, service_name: str, realm: Optional[str]) -> None:
        """Deliver a change notification to every listener."""
        with self.lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(service_name, realm)
            except Exception:
                logger.exception(
                    "Config change listener failed | service=%s | realm=%s", service_name, realm
                )

    def global_instances(self, service_name: str) -> Dict[str, ServiceConfig]:
        return self._global.setdefault(service_name, {})

    def organization_instances(self, service_name: str, realm: str) -> Dict[str, ServiceConfig]:
        realm = normalize_realm(realm)
        return self._organization.setdefault((service_name, realm), {})

    def organization_instance_names(self, service_name: str) -> Set[str]:
        names: Set[str] = set()
        for (service, _realm), instances in self._organization.items():
            if service == service_name:
                names.update(instances)
        return names


class ServiceConfigManager:
    """Access to one service's global and organization configuration."""

    def __init__(self, store: ConfigStore, service_name: str):
        self.store = store
        self.service_name = service_name

    def create_global_config(self, attrs: Attributes, name: Optional[str] = None) -> ServiceConfig:
        return self._create(self.store.global_instances(self.service_name), name, attrs, None)

    def create_organization_config(self, realm: str, attrs: Attributes, name: Optional[str] = None) -> ServiceConfig:
        realm = normalize_realm(realm)
        return self._create(self.store.organization_instances(self.service_name, realm), name, attrs, realm)

    def get_global_config(self, name: Optional[str] = None) -> Optional[ServiceConfig]:
        with self.store.lock:
            return self.store.global_instances(self.service_name).get(name or DEFAULT_INSTANCE)

    def get_organization_config(self, realm: str, name: Optional[str] = None) -> Optional[ServiceConfig]:
        with self.store.lock:
            return self.store.organization_instances(self.service_name, realm).get(name or DEFAULT_INSTANCE)

    def remove_global_configuration(self, name: Optional[str]) -> None:
        self._remove(self.store.global_instances(self.service_name), name, None)

    def remove_organization_configuration(self, realm: str, name: Optional[str]) -> None:
        realm = normalize_realm(realm)
        self._remove(self.store.organization_instances(self.service_name, realm), name, realm)

    def get_instance_names(self) -> Set[str]:
        with self.store.lock:
            names = set(self.store.global_instances(self.service_name))
            names.update(self.store.organization_instance_names(self.service_name))
            return names

    def _create(self, instances: Dict[str, ServiceConfig], name: Optional[str],
                attrs: Attributes, realm: Optional[str]) -> ServiceConfig:
        name = name or DEFAULT_INSTANCE
        with self.store.lock:
            if name in instances:
                raise SmsError(f"Configuration '{name}' already exists for service {self.service_name}")
            config = ServiceConfig(self.store, self.service_name, name, self.service_name, attrs, realm=realm)
            instances[name] = config
        self.store.notify(self.service_name, realm)
        return config

    def _remove(self, instances: Dict[str, ServiceConfig], name: Optional[str], realm: Optional[str]) -> None:
        with self.store.lock:
            removed = instances.pop(name or DEFAULT_INSTANCE, None)
        if removed is None:
            raise SmsError(f"Configuration '{name}' does not exist for service {self.service_name}")
        self.store.notify(self.service_name, realm)


def seed_store(store: ConfigStore, entries: Iterable[Tuple[str, Optional[str], Attributes]]) -> ConfigStore:
    """Create default instances from ``(service, realm, attributes)`` triples."""
    for service_name, realm, attrs in entries:
        manager = ServiceConfigManager(store, service_name)
        if realm is None:
            manager.create_global_config(copy.deepcopy(attrs))
        else:
            manager.create_organization_config(realm, copy.deepcopy(attrs))
    return store
