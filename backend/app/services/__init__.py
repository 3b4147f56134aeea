"""Services Layer — gram handler, SQL repository, and auth service.

Invariants:
    - Services receive collaborators explicitly (repository, storage, db session)
    - Services never build HTTP responses
"""
