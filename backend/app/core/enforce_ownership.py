"""Ownership Guard — decides whether a principal may act on a gram.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Authentication is decided before ownership; ownership is only asked
      once the gram is known to exist (caller's responsibility)
    - Ownership is strict equality between principal and gram owner

Design Decisions:
    - Guard returns an AccessDecision instead of raising: the handler maps
      decisions to errors, keeping this module free of the error hierarchy
"""

from app.core.domain_types import AccessDecision, GramAction, UserId, AUTHENTICATED_ACTIONS


def check_authenticated(principal: UserId | None, action: GramAction) -> AccessDecision:
    """Rule 1: every action except index needs a signed-in principal."""
    if action in AUTHENTICATED_ACTIONS and principal is None:
        return AccessDecision.DENY_UNAUTHENTICATED
    return AccessDecision.ALLOW


def check_owner(principal: UserId, owner_id: UserId) -> AccessDecision:
    """Rule 2: only the gram's owner may edit, update or destroy it.

    Only asked after check_authenticated allowed the request, so principal
    is always a signed-in user here.
    """
    if principal != owner_id:
        return AccessDecision.DENY_NOT_OWNER
    return AccessDecision.ALLOW
