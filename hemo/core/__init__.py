"""
Core utilities shared across the Hemo API.

This package hosts:
- configuration helpers (env vars, feature flags)
- cross-cutting services such as logging, the mailer adapter,
  email templates and the hashing/token primitives.

Services depend on these primitives instead of importing directly from
FastAPI or the storage layer.
"""
