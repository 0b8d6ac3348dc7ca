"""Authentication routes."""
import logging

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from app.core.security import (
    RequestContext,
    check_password,
    check_username,
    get_request_context,
)
from app.core.templating import render

logger = logging.getLogger("app.routes.auth")

router = APIRouter(tags=["Authentication"])


@router.get("/login")
def login_form(request: Request, ctx: RequestContext = Depends(get_request_context)):
    """Render the login form."""
    return render(request, ctx, "login.html", {"title": "Login"})


@router.post("/login")
def login(
    username: str = Form(""),
    password: str = Form(""),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Login with the shared credential.

    - Username is checked first, then password
    - Each mismatch gets its own notice
    - On success the session is marked authenticated
    """
    if not check_username(username):
        logger.info("Login rejected: unknown username")
        ctx.flash("username_error", "Invalid username")
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    if not check_password(password):
        logger.info("Login rejected: wrong password for %s", username)
        ctx.flash("password_error", "Invalid password")
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    ctx.login(username)
    ctx.flash("success", f"Welcome back, {username}!")
    logger.info("User %s logged in", username)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
def logout(ctx: RequestContext = Depends(get_request_context)):
    """Destroy the session and return to the login page."""
    username = ctx.username
    try:
        ctx.destroy()
    except Exception:
        logger.exception("Logout error")
        ctx.flash("error", "Error logging out")
        return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)

    logger.info("User %s logged out", username)
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
