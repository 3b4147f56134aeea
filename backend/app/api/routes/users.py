"""User Routes — sign-up, sign-in and sign-out backing the session cookie.

Invariants:
    - A successful sign-up or sign-in sets an HttpOnly, SameSite=Lax cookie and
      redirects (302) to the root path
    - Failed sign-in answers 401 with the login view and never says which
      credential was wrong; failed sign-up answers 422 with field errors
    - Sign-out is idempotent and always clears the cookie
"""

import logging

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from app.api.dependencies import get_auth_service
from app.api.responses import redirect
from app.config import Settings, get_settings
from app.schemas.user import LoginForm, RegistrationForm
from app.services.auth_service import AuthService, EmailTakenError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])

SIGN_IN_VIEW = "users/sessions/new"
SIGN_UP_VIEW = "users/registrations/new"


def _field_errors(exc: ValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"].removeprefix("Value error, "),
        }
        for e in exc.errors()
    ]


def _signed_in_redirect(token: str, settings: Settings) -> RedirectResponse:
    response = redirect(settings.root_path)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_duration_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.get("/sign_up")
async def sign_up_form():
    return {"view": SIGN_UP_VIEW, "form": {"email": ""}}


@router.post("")
async def sign_up(
    email: str = Form(""),
    password: str = Form(""),
    password_confirmation: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Create an account and sign it in."""
    try:
        form = RegistrationForm(
            email=email, password=password,
            password_confirmation=password_confirmation,
        )
        user = await auth.register_user(form.email, form.password)
    except ValidationError as e:
        errors = _field_errors(e)
    except EmailTakenError:
        errors = [{"field": "email", "message": "has already been taken"}]
    else:
        session = await auth.create_session(user.id)
        return _signed_in_redirect(session.token, settings)

    return JSONResponse(
        status_code=422,
        content={"view": SIGN_UP_VIEW, "form": {"email": email}, "errors": errors},
    )


@router.get("/sign_in")
async def sign_in_form():
    return {"view": SIGN_IN_VIEW, "form": {"email": ""}}


@router.post("/sign_in")
async def sign_in(
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user = None
    try:
        form = LoginForm(email=email, password=password)
    except ValidationError:
        form = None
    if form is not None:
        user = await auth.authenticate(form.email, form.password)
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "view": SIGN_IN_VIEW,
                "form": {"email": email},
                "errors": [{"field": "base", "message": "Invalid email or password."}],
            },
        )
    session = await auth.create_session(user.id)
    return _signed_in_redirect(session.token, settings)


@router.api_route("/sign_out", methods=["DELETE", "POST"])
async def sign_out(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    if await auth.logout(request.cookies.get(settings.session_cookie_name)):
        logger.info("Signed out")
    response = redirect(settings.root_path)
    response.delete_cookie(settings.session_cookie_name)
    return response
