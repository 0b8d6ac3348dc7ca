"""Document model."""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, Text, Uuid
from app.db.base import Base


class ResourceKind(str, enum.Enum):
    """How remote storage should treat a payload."""

    IMAGE = "image"
    RAW = "raw"
    AUTO = "auto"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Document(Base):
    """Metadata for one uploaded file; the bytes live in object storage."""

    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    storage_key = Column(String(512), unique=True, nullable=False)
    url = Column(Text, nullable=False)
    original_name = Column(String(255), nullable=False)
    custom_name = Column(String(255), index=True)
    resource_kind = Column(String(10), nullable=False, default=ResourceKind.RAW.value)
    file_size = Column(Integer)
    mime_type = Column(String(255))
    uploaded_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    @property
    def display_name(self) -> str:
        return self.custom_name or self.original_name
