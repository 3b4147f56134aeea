"""Pydantic Schemas — view payloads and form validation for the HTTP boundary.

Invariants:
    - Schemas validate at system boundary (form input, view output)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
