"""Realm-scoped identity services: self-service dispatch, SMS configuration, legacy audit."""
