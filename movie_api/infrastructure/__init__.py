"""Infrastructure Layer — database access and logging setup.

Invariants:
    - Infrastructure never imports from api/
"""
