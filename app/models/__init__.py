"""Database models."""
from app.models.document import Document, ResourceKind

__all__ = [
    "Document",
    "ResourceKind",
]
