"""Self-service request dispatcher with a per-realm handler cache.

Each realm gets one request handler, built lazily from that realm's console
configuration the first time it is needed and dropped when the realm's
configuration changes:

    ABSENT --(request)--> CONSTRUCTING --> CACHED --(config change)--> ABSENT

Lookups use double-checked locking: a lock-free read on the fast path, then
a re-check and construction under the cache lock on a miss. Invalidation
takes the same lock, so removal and construction for a realm never
interleave. Disabled services are not cached.
"""
from __future__ import annotations
import logging
import threading
from typing import Dict

from ..exceptions import InternalServerError, NotSupportedError, ResourceError
from ..realm import get_realm, normalize_realm
from ..resources import (
    ActionRequest,
    ActionResponse,
    ReadRequest,
    RequestContext,
    RequestHandler,
    Resource,
)
from .config import ConsoleConfigExtractor, ConsoleConfigHandler, ServiceProviderFactory

logger = logging.getLogger(__name__)


class SelfServiceRequestHandler:
    """Dispatches reads and actions to the handler of the request's realm.

    Registers itself with the console config handler on construction so that
    configuration changes invalidate the matching cache entry.

    Args:
        console_config_handler: Resolves realm console configuration
        config_extractor: Feature-specific attribute extractor
        provider_factory: Chooses the service provider for a config
    """

    def __init__(
        self,
        console_config_handler: ConsoleConfigHandler,
        config_extractor: ConsoleConfigExtractor,
        provider_factory: ServiceProviderFactory,
    ):
        self._service_cache: Dict[str, RequestHandler] = {}
        self._cache_lock = threading.Lock()
        self.console_config_handler = console_config_handler
        self.config_extractor = config_extractor
        self.provider_factory = provider_factory

        console_config_handler.register_listener(self)

    def handle_read(self, context: RequestContext, request: ReadRequest) -> Resource:
        try:
            return self.get_service(context).handle_read(context, request)
        except ResourceError:
            raise
        except Exception as exc:
            logger.error("Unable to handle read", exc_info=True)
            raise InternalServerError("Unable to handle read", exc) from exc

    def handle_action(self, context: RequestContext, request: ActionRequest) -> ActionResponse:
        try:
            return self.get_service(context).handle_action(context, request)
        except ResourceError:
            raise
        except Exception as exc:
            logger.error("Unable to handle action", exc_info=True)
            raise InternalServerError("Unable to handle action", exc) from exc

    def get_service(self, context: RequestContext) -> RequestHandler:
        """Return the realm's cached handler, building it on first use."""
        realm = get_realm(context)
        service = self._service_cache.get(realm)

        if service is None:
            with self._cache_lock:
                service = self._service_cache.get(realm)

                if service is None:
                    service = self._create_new_service(context, realm)
                    self._service_cache[realm] = service

        return service

    def _create_new_service(self, context: RequestContext, realm: str) -> RequestHandler:
        console_config = self.console_config_handler.get_config(realm, self.config_extractor)
        service_provider = self.provider_factory.get_provider(console_config)

        if not service_provider.is_service_enabled(console_config):
            raise NotSupportedError("Service not configured")

        logger.info("Building self-service handler | service=%s | realm=%s",
                    self.config_extractor.prefix, realm)
        return service_provider.get_service(console_config, context, realm)

    def config_update(self, realm: str) -> None:
        """Invalidate the cached handler for ``realm`` (no-op when absent)."""
        realm = normalize_realm(realm)
        with self._cache_lock:
            removed = self._service_cache.pop(realm, None)
        if removed is not None:
            logger.info("Invalidated self-service handler | service=%s | realm=%s",
                        self.config_extractor.prefix, realm)

    def cached_realms(self) -> list[str]:
        with self._cache_lock:
            return sorted(self._service_cache)
