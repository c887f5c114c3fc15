"""Self-service features (forgotten password, forgotten username, registration).

- config.py: console config, extractors, config handler, provider factory
- process.py: stage-based process handler and its provider
- request_handler.py: realm-scoped dispatcher with lazy handler cache
"""
from .config import (
    EXTRACTORS,
    FORGOTTEN_PASSWORD,
    FORGOTTEN_USERNAME,
    SELFSERVICE_SERVICE,
    USER_REGISTRATION,
    ConsoleConfig,
    ConsoleConfigExtractor,
    ConsoleConfigHandler,
    ServiceProvider,
    ServiceProviderFactory,
)
from .process import ProcessRequestHandler, ProcessServiceProvider
from .request_handler import SelfServiceRequestHandler

__all__ = [
    "EXTRACTORS",
    "FORGOTTEN_PASSWORD",
    "FORGOTTEN_USERNAME",
    "SELFSERVICE_SERVICE",
    "USER_REGISTRATION",
    "ConsoleConfig",
    "ConsoleConfigExtractor",
    "ConsoleConfigHandler",
    "ServiceProvider",
    "ServiceProviderFactory",
    "ProcessRequestHandler",
    "ProcessServiceProvider",
    "SelfServiceRequestHandler",
]
