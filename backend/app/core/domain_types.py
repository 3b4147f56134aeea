"""Domain Types — identity wrappers and enums shared by the gram core.

Invariants:
    - UserId, GramId wrap UUIDs; never pass a bare UUID through domain logic
    - Every handler action and redirect target is an Enum member, not a raw string

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - RedirectTarget is symbolic: the API layer resolves it to a path from settings,
      so core never knows URLs
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
GramId = NewType("GramId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class GramAction(str, Enum):
    """The seven actions served by the gram resource."""
    INDEX = "index"
    NEW = "new"
    SHOW = "show"
    CREATE = "create"
    EDIT = "edit"
    UPDATE = "update"
    DESTROY = "destroy"


class RedirectTarget(str, Enum):
    """Where a redirect response points. Resolved to a path by the API layer."""
    LOGIN = "login"
    ROOT = "root"


class AccessDecision(str, Enum):
    """Outcome of the authentication and ownership guards."""
    ALLOW = "allow"
    DENY_UNAUTHENTICATED = "deny_unauthenticated"
    DENY_NOT_OWNER = "deny_not_owner"


class GramView(str, Enum):
    """View identifiers rendered for gram actions."""
    INDEX = "grams/index"
    NEW = "grams/new"
    SHOW = "grams/show"
    EDIT = "grams/edit"


# Actions that need a signed-in principal. INDEX is public.
AUTHENTICATED_ACTIONS = frozenset({
    GramAction.NEW, GramAction.SHOW, GramAction.CREATE,
    GramAction.EDIT, GramAction.UPDATE, GramAction.DESTROY,
})

# Actions restricted to the gram's owner (checked after existence).
OWNER_ACTIONS = frozenset({
    GramAction.EDIT, GramAction.UPDATE, GramAction.DESTROY,
})
