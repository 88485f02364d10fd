"""Infrastructure Layer — database sessions, authentication tokens, logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Database exceptions mapped to core/errors types before leaving this layer
"""
