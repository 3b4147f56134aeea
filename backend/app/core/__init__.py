"""Core Layer — pure gram rules: ownership guard, validation, request/response shapes.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic
"""
