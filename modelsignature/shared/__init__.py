"""
Shared utilities for the ModelSignature SDK.

- config: Client settings via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus collectors for requests and decisions
- errors: Canonical error types
- retry: Backoff and retry for authority calls
- test_helpers: Token and payload factories for tests

Do not import from adapters/ or policy/ into shared/.
"""
