"""SMS (service management) configuration resources.

- config_tree.py: in-memory global/organization configuration tree with change listeners
- json_converter.py: attribute ⇔ JSON conversion typed by schema
- collection_provider.py: create/read/update/delete/query collection provider
"""
from .config_tree import (
    DEFAULT_INSTANCE,
    AttributeSchema,
    ConfigStore,
    SchemaType,
    ServiceConfig,
    ServiceConfigManager,
    ServiceSchema,
    SmsError,
    seed_store,
)
from .json_converter import SmsJsonConverter
from .collection_provider import SmsCollectionProvider, SmsResourceProvider

__all__ = [
    "DEFAULT_INSTANCE",
    "AttributeSchema",
    "ConfigStore",
    "SchemaType",
    "ServiceConfig",
    "ServiceConfigManager",
    "ServiceSchema",
    "SmsError",
    "seed_store",
    "SmsJsonConverter",
    "SmsCollectionProvider",
    "SmsResourceProvider",
]
