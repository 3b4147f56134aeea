"""Gram Routes — HTTP surface of the gram resource.

Invariants:
    - gram_id is taken as a raw string: malformed ids reach the handler and
      end as 404 after the authentication check, never as a 422 from FastAPI
    - Every route builds a RequestContext with the explicit principal and
      renders the handler's ResponseDescriptor

Design Decisions:
    - Multipart form (message + picture) for create and update; both fields
      optional at the HTTP layer so validation is owned by the core
    - message is read from the raw form: FastAPI maps an empty form field to
      its default, which would turn a blank message into "keep current"
    - PATCH and PUT share one route
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile

from app.api.dependencies import get_current_user_id, get_gram_handler
from app.api.responses import render
from app.config import Settings, get_settings
from app.core.domain_types import GramAction, UserId
from app.core.request_context import GramPayload, PictureUpload, RequestContext
from app.services.handle_grams import GramHandler

router = APIRouter(tags=["grams"])


async def _submitted_message(request: Request) -> str | None:
    """The message field as sent: "" stays "", None only when absent."""
    value = (await request.form()).get("message")
    return value if isinstance(value, str) else None


async def _read_picture(picture: UploadFile | None) -> PictureUpload | None:
    """An empty file input arrives as an UploadFile with no filename."""
    if picture is None or not picture.filename:
        return None
    data = await picture.read()
    return PictureUpload(
        filename=picture.filename, content_type=picture.content_type, data=data,
    )


def _principal(user_id: UUID | None) -> UserId | None:
    return UserId(user_id) if user_id is not None else None


async def _run(
    handler: GramHandler, settings: Settings, ctx: RequestContext,
):
    return render(await handler.handle(ctx), settings)


@router.get("/")
@router.get("/grams")
async def index(
    limit: int | None = Query(None, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    """List grams, newest first."""
    ctx = RequestContext(
        action=GramAction.INDEX,
        principal=_principal(user_id),
        limit=min(limit or settings.default_page_size, settings.max_page_size),
        offset=offset,
    )
    return await _run(handler, settings, ctx)


@router.get("/grams/new")
async def new_gram(
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(action=GramAction.NEW, principal=_principal(user_id))
    return await _run(handler, settings, ctx)


@router.post("/grams")
async def create_gram(
    request: Request,
    picture: UploadFile | None = File(None),
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(
        action=GramAction.CREATE,
        principal=_principal(user_id),
        payload=GramPayload(
            message=await _submitted_message(request),
            picture=await _read_picture(picture),
        ),
    )
    return await _run(handler, settings, ctx)


@router.get("/grams/{gram_id}")
async def show_gram(
    gram_id: str,
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(
        action=GramAction.SHOW, principal=_principal(user_id), gram_id=gram_id,
    )
    return await _run(handler, settings, ctx)


@router.get("/grams/{gram_id}/edit")
async def edit_gram(
    gram_id: str,
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(
        action=GramAction.EDIT, principal=_principal(user_id), gram_id=gram_id,
    )
    return await _run(handler, settings, ctx)


@router.api_route("/grams/{gram_id}", methods=["PATCH", "PUT"])
async def update_gram(
    gram_id: str,
    request: Request,
    picture: UploadFile | None = File(None),
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(
        action=GramAction.UPDATE,
        principal=_principal(user_id),
        gram_id=gram_id,
        payload=GramPayload(
            message=await _submitted_message(request),
            picture=await _read_picture(picture),
        ),
    )
    return await _run(handler, settings, ctx)


@router.delete("/grams/{gram_id}")
async def destroy_gram(
    gram_id: str,
    user_id: UUID | None = Depends(get_current_user_id),
    handler: GramHandler = Depends(get_gram_handler),
    settings: Settings = Depends(get_settings),
):
    ctx = RequestContext(
        action=GramAction.DESTROY, principal=_principal(user_id), gram_id=gram_id,
    )
    return await _run(handler, settings, ctx)
