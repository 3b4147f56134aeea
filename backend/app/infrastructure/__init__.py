"""Infrastructure Layer — database engine, picture files, logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Driver-level exceptions are mapped to core/errors.py types here
"""
