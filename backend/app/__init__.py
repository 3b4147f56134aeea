"""Grammable Application Package — captioned picture posts with owner-only editing.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
