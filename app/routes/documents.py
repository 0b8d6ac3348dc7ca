"""Document routes: upload, list/search, delete and download."""
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.security import RequestContext, require_login
from app.core.templating import render
from app.models.document import Document, utcnow
from app.schemas.document import DocumentCreate, validate_document_fields
from app.services.document_store import DocumentStore, DuplicateDocumentError, get_document_store
from app.services.download_service import (
    content_disposition,
    download_filename,
    get_http_client,
    resolve_content_type,
)
from app.services.storage_service import StorageError, StorageService, get_storage_service
from app.utils.file_processor import FileProcessor

logger = logging.getLogger("app.routes.documents")

router = APIRouter(tags=["Documents"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/upload")
def upload_form(request: Request, ctx: RequestContext = Depends(require_login)):
    return render(request, ctx, "upload.html", {"title": "Upload Document"})


@router.post("/upload")
async def upload_document(
    document: Optional[UploadFile] = File(None),
    custom_name: Optional[str] = Form(None),
    ctx: RequestContext = Depends(require_login),
    store: DocumentStore = Depends(get_document_store),
    storage: StorageService = Depends(get_storage_service),
):
    """
    Store an uploaded file and record its metadata.

    The payload goes to object storage first; the record is written only
    after storage accepted it. A record that then fails validation or
    persistence leaves the stored object behind.
    """
    if document is None or not document.filename:
        ctx.flash("error", "No file uploaded. Please select a file.")
        return _redirect("/upload")

    filename = document.filename
    if not FileProcessor.is_supported(filename, settings.ALLOWED_EXTENSIONS):
        ctx.flash(
            "error",
            f"Unsupported file format. Allowed: {', '.join(settings.ALLOWED_EXTENSIONS)}",
        )
        return _redirect("/upload")

    # Never buffer more than one byte past the limit
    oversized = document.size is not None and document.size > settings.MAX_UPLOAD_BYTES
    content = b"" if oversized else await document.read(settings.MAX_UPLOAD_BYTES + 1)
    if oversized or len(content) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        ctx.flash("error", f"File too large. Maximum size is {limit_mb:g} MB.")
        return _redirect("/upload")

    kind = FileProcessor.classify_resource_kind(document.content_type)

    try:
        stored = await run_in_threadpool(
            storage.upload, content, filename, document.content_type, kind
        )
    except StorageError as e:
        logger.error("Upload error for %s: %s", filename, e)
        ctx.flash("error", "File upload failed. Please check storage configuration.")
        return _redirect("/upload")

    if not stored.storage_key or not stored.url:
        ctx.flash("error", "File upload failed. Please check storage configuration.")
        return _redirect("/upload")

    fields = {
        "storage_key": stored.storage_key,
        "url": stored.url,
        "original_name": filename,
        "custom_name": (custom_name or "").strip() or filename,
        "resource_kind": kind,
        "file_size": len(content),
        "mime_type": document.content_type,
        "uploaded_at": utcnow(),
    }

    violations = validate_document_fields(fields)
    if violations:
        failed = list(dict.fromkeys(v.field for v in violations))
        logger.warning("Document validation failed for %s: %s", stored.storage_key, failed)
        ctx.flash("error", "Validation failed: " + ", ".join(failed))
        return _redirect("/upload")

    try:
        saved = store.create(DocumentCreate(**fields))
    except DuplicateDocumentError:
        logger.warning("Duplicate storage key %s", stored.storage_key)
        ctx.flash("error", "A document with this storage key already exists (duplicate upload).")
        return _redirect("/upload")
    except SQLAlchemyError as e:
        logger.exception("Upload error while saving %s", stored.storage_key)
        ctx.flash("error", f"Error saving file: {e}")
        return _redirect("/upload")

    logger.info("Document %s saved as %s", saved.id, saved.storage_key)
    ctx.flash("success", "File uploaded & saved successfully!")
    return _redirect("/documents")


@router.get("/documents")
def list_documents(
    request: Request,
    q: str = "",
    ctx: RequestContext = Depends(require_login),
    store: DocumentStore = Depends(get_document_store),
):
    """List all documents, or those whose name contains ``q``."""
    try:
        documents = store.list(q)
    except SQLAlchemyError:
        logger.exception("Documents fetch error")
        ctx.flash("error", "Failed to load documents.")
        return _redirect("/")

    return render(
        request,
        ctx,
        "documents.html",
        {"title": "All Uploaded Documents", "documents": documents, "search_query": q},
    )


def _discard_remote_object(storage: StorageService, document: Document) -> bool:
    """
    Best-effort removal of the stored payload.

    Failures are logged and reported as False; callers go on deleting the
    record regardless, so an orphaned object is possible.
    """
    try:
        storage.delete(document.storage_key, document.resource_kind)
    except Exception as e:
        logger.warning("Storage delete failed for %s: %s", document.storage_key, e)
        return False
    return True


@router.delete("/documents/{document_id}")
def delete_document(
    document_id: str,
    ctx: RequestContext = Depends(require_login),
    store: DocumentStore = Depends(get_document_store),
    storage: StorageService = Depends(get_storage_service),
):
    """Delete a record and, best-effort, its stored payload."""
    try:
        document = store.get(document_id)
        if document is None:
            ctx.flash("error", "Document not found.")
            return _redirect("/documents")

        # result intentionally unused: the record goes either way
        _discard_remote_object(storage, document)
        store.delete(document)
    except Exception as e:
        logger.exception("Delete error for %s", document_id)
        ctx.flash("error", f"Error deleting document: {e}")
        return _redirect("/documents")

    logger.info("Document %s deleted", document_id)
    ctx.flash("success", "Document deleted successfully!")
    return _redirect("/documents")


@router.get("/documents/{document_id}/download")
async def download_document(
    document_id: str,
    ctx: RequestContext = Depends(require_login),
    store: DocumentStore = Depends(get_document_store),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Send the stored payload as an attachment, or redirect to it."""
    try:
        document = store.get(document_id)
        if document is None:
            ctx.flash("error", "Document not found.")
            return _redirect("/documents")

        if settings.DOWNLOAD_MODE == "redirect":
            return _redirect(document.url)

        upstream = await http_client.get(document.url)
        upstream.raise_for_status()
    except Exception:
        logger.exception("Download error for %s", document_id)
        ctx.flash("error", "Error downloading document.")
        return _redirect("/documents")

    return Response(
        content=upstream.content,
        media_type=resolve_content_type(document, upstream.headers.get("content-type")),
        headers={"Content-Disposition": content_disposition(download_filename(document))},
    )
