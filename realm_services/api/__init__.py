"""HTTP layer: Flask blueprints over the core services.

- health.py: liveness/readiness probes
- docs.py: OpenAPI document
- selfservice.py: realm self-service read/action
- sms.py: SMS configuration collections
- audit.py: legacy authentication audit intake
- errors.py: JSON error handlers
"""
