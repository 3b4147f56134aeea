"""Request Context & Response Descriptor — per-request inputs and outputs of the gram handler.

Invariants:
    - RequestContext carries the principal explicitly (None = anonymous);
      handlers never read ambient session state
    - gram_id is the raw path segment, possibly malformed; resolution is the
      store's job
    - ResponseDescriptor has either a redirect or a view, never both

Design Decisions:
    - Plain dataclasses, no FastAPI types: core stays framework-free and the
      API layer renders descriptors into Response objects
"""

from dataclasses import dataclass, field
from typing import Any

from app.core.domain_types import GramAction, GramView, RedirectTarget, UserId


@dataclass(frozen=True)
class PictureUpload:
    """An uploaded picture, already read into memory."""
    filename: str
    content_type: str | None
    data: bytes


@dataclass
class GramPayload:
    """Submitted form fields. None means the field was not sent."""
    message: str | None = None
    picture: PictureUpload | None = None

    def form_values(self) -> dict:
        """Values echoed back when the form is re-rendered."""
        return {
            "message": self.message,
            "picture_filename": self.picture.filename if self.picture else None,
        }


@dataclass
class RequestContext:
    action: GramAction
    principal: UserId | None = None
    gram_id: str | None = None
    payload: GramPayload | None = None
    limit: int = 20
    offset: int = 0


@dataclass
class ResponseDescriptor:
    """HTTP-shaped outcome of a handler action."""
    status: int
    redirect: RedirectTarget | None = None
    view: GramView | None = None
    gram: Any = None
    grams: list[Any] = field(default_factory=list)
    form: dict | None = None
    errors: list = field(default_factory=list)
    total: int | None = None
    limit: int | None = None
    offset: int | None = None

    @classmethod
    def redirect_to(cls, target: RedirectTarget) -> "ResponseDescriptor":
        return cls(status=302, redirect=target)

    @property
    def is_redirect(self) -> bool:
        return self.redirect is not None
