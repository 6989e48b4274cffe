"""
Core utilities shared across the AURA API.

This package hosts configuration helpers (env vars, paths, feature flags),
logging setup and the outbound mail adapter. Routers and services should
depend on these primitives instead of reading os.environ directly.
"""
