"""
Shared utilities for the Annotator.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with reconcile correlation
- errors: Canonical error types and responses
- test_helpers: Factories for policies and objects used by tests

Any cross-component logic should live here to avoid import cycles.
Do not import from service_* packages into shared/.
"""
