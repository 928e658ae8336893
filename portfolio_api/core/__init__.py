"""
Core utilities shared across the portfolio API.

This package hosts:
- configuration helpers (env vars, feature settings)
- cross-cutting services such as logging setup and password hashing

Services and repositories depend on these primitives instead of reading the
environment or configuring handlers themselves.
"""
