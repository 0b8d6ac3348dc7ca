"""Metadata store for document records."""
import logging
import uuid
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.sessions import get_db
from app.models.document import Document
from app.schemas.document import DocumentCreate

logger = logging.getLogger("app.services.document_store")


class DuplicateDocumentError(Exception):
    """A record with the same storage key already exists."""


class DocumentStore:
    """Persist, query and delete document records."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: DocumentCreate) -> Document:
        """
        Insert a new record.

        Raises:
            DuplicateDocumentError: If ``storage_key`` is already taken
            SQLAlchemyError: On any other persistence failure
        """
        fields = data.model_dump(exclude_none=True)
        fields["resource_kind"] = data.resource_kind.value
        document = Document(**fields)
        self.db.add(document)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self._storage_key_taken(data.storage_key):
                raise DuplicateDocumentError(data.storage_key) from e
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(document)
        return document

    def _storage_key_taken(self, storage_key: str) -> bool:
        return (
            self.db.query(Document.id).filter(Document.storage_key == storage_key).first()
            is not None
        )

    def get(self, document_id: str) -> Optional[Document]:
        """Fetch a record by id; malformed ids are treated as absent."""
        try:
            doc_uuid = uuid.UUID(str(document_id))
        except ValueError:
            return None
        return self.db.get(Document, doc_uuid)

    def list(self, query: Optional[str] = None) -> List[Document]:
        """
        Return records newest first.

        A non-blank ``query`` keeps only records whose custom or original name
        contains it, case-insensitively and literally (``%`` and ``_`` are not
        wildcards).
        """
        q = self.db.query(Document)
        query = (query or "").strip()
        if query:
            q = q.filter(
                or_(
                    Document.custom_name.icontains(query, autoescape=True),
                    Document.original_name.icontains(query, autoescape=True),
                )
            )
        return q.order_by(Document.uploaded_at.desc()).all()

    def delete(self, document: Document) -> None:
        self.db.delete(document)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


def get_document_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)
