"""Infrastructure Layer — program interface codec and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/ or services/
"""
