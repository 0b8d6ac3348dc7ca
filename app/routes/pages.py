"""Home page and liveness routes."""
from fastapi import APIRouter, Depends, Request

from app.core.security import RequestContext, require_login
from app.core.templating import render

router = APIRouter(tags=["Pages"])


@router.get("/")
def home(request: Request, ctx: RequestContext = Depends(require_login)):
    return render(request, ctx, "index.html", {"title": f"Welcome, {ctx.username}"})


@router.get("/health")
def health():
    return {"status": "ok"}
