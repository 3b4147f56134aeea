"""ORM Models — SQLAlchemy declarative models for users, sessions and grams.

Invariants:
    - All models inherit from Base (db/base.py)
    - User owns grams and sessions; deleting a user cascades to both

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User, UserSession  # noqa: F401
from app.models.gram import Gram  # noqa: F401
