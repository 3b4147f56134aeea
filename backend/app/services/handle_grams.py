"""Gram Request Handler — the seven gram actions behind authentication and ownership checks.

Invariants:
    - Check order is fixed: authentication → existence → ownership
    - Validation failures return a 422 descriptor and never touch the store
      or picture storage
    - A picture is stored only after validation passes; if the record write
      then fails, the stored picture is removed again before re-raising
    - Store errors propagate unchanged (mapped to 500 by the global handler)
    - Picture removal after a committed write is best-effort: a StorageError
      is logged and the redirect is still returned

Design Decisions:
    - Access failures raise (UnauthenticatedError, ResourceNotFoundError,
      ForbiddenError); validation failures return a descriptor, because they
      re-render a form with submitted values instead of an error envelope
    - Action dispatch via dict, same handler instance per request
"""

import logging

from app.core.domain_types import (
    AccessDecision, GramAction, GramView, RedirectTarget, UserId, OWNER_ACTIONS,
)
from app.core.enforce_ownership import check_authenticated, check_owner
from app.core.errors import (
    ErrorContext, ForbiddenError, ResourceNotFoundError, StorageError,
    UnauthenticatedError,
)
from app.core.repository_protocols import GramLike, GramRepository, PictureStorage
from app.core.request_context import GramPayload, RequestContext, ResponseDescriptor
from app.core.validate_gram import validate_gram_input

logger = logging.getLogger(__name__)


class GramHandler:
    """Serves gram actions against a repository and a picture store."""

    def __init__(self, repo: GramRepository, storage: PictureStorage):
        self._repo = repo
        self._storage = storage
        self._actions = {
            GramAction.INDEX: self.index,
            GramAction.NEW: self.new,
            GramAction.SHOW: self.show,
            GramAction.CREATE: self.create,
            GramAction.EDIT: self.edit,
            GramAction.UPDATE: self.update,
            GramAction.DESTROY: self.destroy,
        }

    async def handle(self, ctx: RequestContext) -> ResponseDescriptor:
        """Authenticate, then run the action named by the context."""
        if check_authenticated(ctx.principal, ctx.action) is not AccessDecision.ALLOW:
            logger.info(
                f"Anonymous {ctx.action.value} redirected to login",
                extra={"action": ctx.action.value, "gram_id": ctx.gram_id},
            )
            raise UnauthenticatedError(_error_context(ctx))
        return await self._actions[ctx.action](ctx)

    # ─── Actions ─────────────────────────────────────────────────

    async def index(self, ctx: RequestContext) -> ResponseDescriptor:
        grams = await self._repo.list_page(ctx.limit, ctx.offset)
        total = await self._repo.count()
        return ResponseDescriptor(
            status=200, view=GramView.INDEX, grams=grams,
            total=total, limit=ctx.limit, offset=ctx.offset,
        )

    async def new(self, ctx: RequestContext) -> ResponseDescriptor:
        return ResponseDescriptor(
            status=200, view=GramView.NEW, form={"message": ""},
        )

    async def show(self, ctx: RequestContext) -> ResponseDescriptor:
        gram = await self._load_gram(ctx)
        return ResponseDescriptor(status=200, view=GramView.SHOW, gram=gram)

    async def create(self, ctx: RequestContext) -> ResponseDescriptor:
        payload = ctx.payload or GramPayload()
        result = validate_gram_input(payload.message, payload.picture)
        if not result.ok:
            logger.info(
                "Gram create rejected by validation",
                extra={"action": ctx.action.value, "user_id": str(ctx.principal)},
            )
            return ResponseDescriptor(
                status=422, view=GramView.NEW,
                form=payload.form_values(), errors=result.errors,
            )

        ref = await self._storage.save(payload.picture)
        try:
            gram = await self._repo.create(
                {"message": payload.message, "picture": ref}, ctx.principal,
            )
        except Exception:
            await self._discard_picture(ref, None)
            raise
        logger.info(
            f"Gram {gram.id} created",
            extra={"gram_id": str(gram.id), "user_id": str(ctx.principal)},
        )
        return ResponseDescriptor.redirect_to(RedirectTarget.ROOT)

    async def edit(self, ctx: RequestContext) -> ResponseDescriptor:
        gram = await self._load_gram(ctx)
        return ResponseDescriptor(
            status=200, view=GramView.EDIT, gram=gram,
            form={"message": gram.message},
        )

    async def update(self, ctx: RequestContext) -> ResponseDescriptor:
        gram = await self._load_gram(ctx)
        payload = ctx.payload or GramPayload()
        message = payload.message if payload.message is not None else gram.message
        result = validate_gram_input(
            message, payload.picture, has_current_picture=bool(gram.picture),
        )
        if not result.ok:
            logger.info(
                f"Gram {gram.id} update rejected by validation",
                extra={"gram_id": str(gram.id), "user_id": str(ctx.principal)},
            )
            return ResponseDescriptor(
                status=422, view=GramView.EDIT, gram=gram,
                form=payload.form_values(), errors=result.errors,
            )

        attrs: dict = {"message": message}
        replaced = None
        if payload.picture is not None:
            attrs["picture"] = await self._storage.save(payload.picture)
            replaced = gram.picture
        try:
            await self._repo.update(gram, attrs)
        except Exception:
            if "picture" in attrs:
                await self._discard_picture(attrs["picture"], gram.id)
            raise
        if replaced:
            await self._discard_picture(replaced, gram.id)
        logger.info(
            f"Gram {gram.id} updated",
            extra={"gram_id": str(gram.id), "user_id": str(ctx.principal)},
        )
        return ResponseDescriptor.redirect_to(RedirectTarget.ROOT)

    async def destroy(self, ctx: RequestContext) -> ResponseDescriptor:
        gram = await self._load_gram(ctx)
        gram_id, ref = gram.id, gram.picture
        await self._repo.delete(gram)
        if ref:
            await self._discard_picture(ref, gram_id)
        logger.info(
            f"Gram {gram_id} destroyed",
            extra={"gram_id": str(gram_id), "user_id": str(ctx.principal)},
        )
        return ResponseDescriptor.redirect_to(RedirectTarget.ROOT)

    # ─── Lookup and cleanup helpers ──────────────────────────────

    async def _load_gram(self, ctx: RequestContext) -> GramLike:
        """Existence first (404), then ownership for OWNER_ACTIONS (403)."""
        gram = await self._repo.find(ctx.gram_id or "")
        if gram is None:
            raise ResourceNotFoundError("Gram", str(ctx.gram_id), _error_context(ctx))
        if ctx.action not in OWNER_ACTIONS:
            return gram
        if check_owner(ctx.principal, UserId(gram.user_id)) is AccessDecision.DENY_NOT_OWNER:
            logger.warning(
                f"User {ctx.principal} denied {ctx.action.value} on gram {gram.id}",
                extra={
                    "gram_id": str(gram.id), "user_id": str(ctx.principal),
                    "action": ctx.action.value,
                },
            )
            raise ForbiddenError("Gram", str(gram.id), _error_context(ctx))
        return gram

    async def _discard_picture(self, ref: str, gram_id) -> None:
        """Remove a stored picture; a storage failure is logged, not raised."""
        try:
            await self._storage.delete(ref)
        except StorageError as e:
            logger.warning(
                f"Picture {ref} left behind: {e.message}",
                extra={"gram_id": str(gram_id) if gram_id else None},
            )


def _error_context(ctx: RequestContext) -> ErrorContext:
    return ErrorContext(
        user_id=str(ctx.principal) if ctx.principal else None,
        gram_id=ctx.gram_id,
        action=ctx.action.value,
    )
