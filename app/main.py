import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import settings
from app.core.middleware import CatchAllExceptionMiddleware, MethodOverrideMiddleware
from app.core.security import LoginRequired, RequestContext
from app.core.templating import render
from app.db.sessions import init_db
from app.routes import auth, documents, pages

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 %s v%s starting...", settings.APP_NAME, settings.APP_VERSION)
    init_db()
    logger.info("🔐 Session authentication enabled")
    yield
    logger.info("%s shutting down", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Session-authenticated document repository backed by object storage",
    lifespan=lifespan,
)

# Last added runs first: sessions wrap the override and the catch-all
app.add_middleware(CatchAllExceptionMiddleware)
app.add_middleware(MethodOverrideMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse("/login", status_code=303)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Unmatched paths and unsupported methods on known paths both read as missing pages
    if exc.status_code not in (404, 405):
        return await http_exception_handler(request, exc)
    return render(
        request,
        RequestContext(request.session),
        "error.html",
        {"title": "Page Not Found", "message": "The page you're looking for doesn't exist."},
        status_code=404,
    )


# Register routers
app.include_router(auth.router)
app.include_router(pages.router)
app.include_router(documents.router)
