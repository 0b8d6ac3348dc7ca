"""Helpers for proxying stored payloads back to the browser."""
import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx

from app.models.document import Document, ResourceKind

DEFAULT_CONTENT_TYPE = "application/octet-stream"


async def get_http_client():
    """FastAPI dependency yielding a client for fetching stored payloads."""
    async with httpx.AsyncClient(follow_redirects=True) as client:
        yield client


def download_filename(document: Document) -> str:
    """Display name, borrowing the original extension when it has none."""
    name = (document.custom_name or "").strip() or document.original_name
    if not Path(name).suffix:
        name += Path(document.original_name).suffix
    return name


def resolve_content_type(document: Document, upstream_type: Optional[str] = None) -> str:
    """
    Pick the response content type.

    Preference: guess from the file extension, then the MIME type declared
    at upload, then the resource kind, then what the storage service sent.
    """
    guessed, _ = mimetypes.guess_type(document.original_name)
    if guessed:
        return guessed
    if document.mime_type:
        return document.mime_type
    if document.resource_kind == ResourceKind.IMAGE.value:
        return "image/jpeg"
    if upstream_type:
        return upstream_type
    return DEFAULT_CONTENT_TYPE


def content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quoted}"
