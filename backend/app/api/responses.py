"""Response Rendering — turns handler ResponseDescriptors into HTTP responses.

Invariants:
    - Redirects are always 302 (Starlette's RedirectResponse defaults to 307)
    - View responses are JSON documents with a "view" key naming the template
    - Field errors and submitted form values are echoed on 422

Design Decisions:
    - Symbolic RedirectTarget resolved against settings here, the only place
      that knows URL paths
"""

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from app.config import Settings
from app.core.domain_types import GramView, RedirectTarget
from app.core.request_context import ResponseDescriptor
from app.schemas.gram import GramResponse, Pagination


def redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=status.HTTP_302_FOUND)


def resolve_redirect(target: RedirectTarget, settings: Settings) -> str:
    if target is RedirectTarget.LOGIN:
        return settings.login_path
    return settings.root_path


def render(descriptor: ResponseDescriptor, settings: Settings) -> Response:
    """Render a descriptor as a redirect or a JSON view."""
    if descriptor.is_redirect:
        return redirect(resolve_redirect(descriptor.redirect, settings))

    prefix = settings.upload_url_prefix
    content: dict = {"view": descriptor.view.value}
    if descriptor.view is GramView.INDEX:
        content["grams"] = [
            GramResponse.from_gram(g, prefix).model_dump(mode="json")
            for g in descriptor.grams
        ]
        content["pagination"] = Pagination(
            limit=descriptor.limit, offset=descriptor.offset, total=descriptor.total,
        ).model_dump()
    if descriptor.gram is not None:
        content["gram"] = GramResponse.from_gram(
            descriptor.gram, prefix,
        ).model_dump(mode="json")
    if descriptor.form is not None:
        content["form"] = descriptor.form
    if descriptor.errors:
        content["errors"] = [e.to_dict() for e in descriptor.errors]
    return JSONResponse(status_code=descriptor.status, content=content)
