"""Session context, flash notices and the login gate."""
import hmac
import logging
from typing import Dict, List, Optional

from fastapi import Depends, Request

from app.core.config import settings

logger = logging.getLogger("app.core.security")

NOTICE_CATEGORIES = ("success", "error", "username_error", "password_error")
_FLASH_KEY = "_flash"


class LoginRequired(Exception):
    """Raised by the session gate; handled by redirecting to the login page."""


class RequestContext:
    """
    Per-request view of the cookie session.

    Carries the authentication flag, the logged in username and the one-shot
    notice queues. Handlers receive it as a dependency instead of reaching
    into ``request.session`` themselves.
    """

    def __init__(self, session: dict):
        self.session = session

    @property
    def is_authenticated(self) -> bool:
        return bool(self.session.get("is_authenticated"))

    @property
    def username(self) -> Optional[str]:
        return self.session.get("username")

    def login(self, username: str) -> None:
        self.session["is_authenticated"] = True
        self.session["username"] = username

    def destroy(self) -> None:
        self.session.clear()

    def flash(self, category: str, message: str) -> None:
        if category not in NOTICE_CATEGORIES:
            raise ValueError(f"Unknown notice category: {category}")
        # Nested edits are invisible to the cookie session; assign a fresh copy
        queues = {k: list(v) for k, v in (self.session.get(_FLASH_KEY) or {}).items()}
        queues.setdefault(category, []).append(message)
        self.session[_FLASH_KEY] = queues

    def pop_notices(self) -> Dict[str, List[str]]:
        """Drain every notice queue; each notice is shown once."""
        queues = self.session.get(_FLASH_KEY) or {}
        if _FLASH_KEY in self.session:
            del self.session[_FLASH_KEY]
        return {category: list(queues.get(category, [])) for category in NOTICE_CATEGORIES}


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(request.session)


def require_login(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """
    Dependency guarding every protected route.

    Usage:
        @router.get("/protected")
        def protected_route(ctx: RequestContext = Depends(require_login)):
            return {"user": ctx.username}
    """
    if not ctx.is_authenticated:
        ctx.flash("error", "Please login to access this page")
        raise LoginRequired()
    return ctx


def check_username(username: str) -> bool:
    return _equals(username, settings.APP_USERNAME)


def check_password(password: str) -> bool:
    return _equals(password, settings.APP_PASSWORD)


def _equals(given: Optional[str], expected: str) -> bool:
    """Exact string comparison in constant time."""
    if given is None:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))
