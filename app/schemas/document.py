"""Static schema for document records and its validation."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from app.models.document import ResourceKind


class DocumentCreate(BaseModel):
    """Fields required before a record may be persisted."""

    storage_key: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    original_name: str = Field(..., min_length=1)
    custom_name: Optional[str] = None
    resource_kind: ResourceKind = ResourceKind.RAW
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class FieldViolation(BaseModel):
    field: str
    message: str


def validate_document_fields(data: Dict[str, Any]) -> List[FieldViolation]:
    """Return every schema violation in ``data``; an empty list means valid."""
    try:
        DocumentCreate(**data)
    except ValidationError as e:
        return [
            FieldViolation(
                field=".".join(str(part) for part in error["loc"]),
                message=error["msg"],
            )
            for error in e.errors()
        ]
    return []
