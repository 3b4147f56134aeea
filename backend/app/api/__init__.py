"""API Layer — FastAPI routes, dependencies, response rendering, error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes build a RequestContext and delegate to services; no business logic here
"""
