import logging

from starlette.datastructures import QueryParams
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from app.core.security import RequestContext

logger = logging.getLogger("app.core.middleware")


class MethodOverrideMiddleware:
    """Let HTML forms send ``POST ...?_method=DELETE`` (or PUT/PATCH)."""

    ALLOWED_METHODS = {"DELETE", "PUT", "PATCH"}

    def __init__(self, app, param: str = "_method"):
        self.app = app
        self.param = param

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["method"] == "POST":
            params = QueryParams(scope.get("query_string", b"").decode("latin-1"))
            override = (params.get(self.param) or "").upper()
            if override in self.ALLOWED_METHODS:
                scope = dict(scope, method=override)
        await self.app(scope, receive, send)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Last-resort handler: log, flash a generic notice and go home.

    Must sit inside the session middleware so the notice is saved.
    """

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}", exc_info=True)
            if "session" in request.scope:
                RequestContext(request.session).flash("error", "Something went wrong!")
            return RedirectResponse("/", status_code=HTTP_303_SEE_OTHER)
