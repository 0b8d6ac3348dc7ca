"""Jinja2 template rendering with session-aware globals."""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.core.config import settings
from app.core.security import RequestContext

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["app_name"] = settings.APP_NAME


def render(
    request: Request,
    ctx: RequestContext,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render ``name`` with auth state and the drained flash notices."""
    page = {
        "is_authenticated": ctx.is_authenticated,
        "username": ctx.username,
        "notices": ctx.pop_notices(),
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)
