"""Core Business Logic Module

Framework-independent realm services: no Flask imports below this package,
so everything here is testable without an HTTP client.

Module Structure:
    - resources.py   : Request/response value types, RequestContext
    - exceptions.py  : ResourceError taxonomy (400/404/500/501)
    - realm.py       : Realm path normalization and resolution
    - selfservice/   : Realm-scoped self-service dispatcher and providers
    - sms/           : Service configuration tree and collection provider
    - audit/         : Audit event builders, auditors, legacy translator

Usage Pattern:
    Import explicitly when needed:
        from realm_services.core.selfservice import SelfServiceRequestHandler
        from realm_services.core.sms import SmsCollectionProvider, ConfigStore
        from realm_services.core.audit import LegacyAuthenticationEventAuditor
"""
