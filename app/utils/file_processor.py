"""File helpers for classifying and naming uploaded payloads."""
import re
import time
from typing import Iterable, Optional
from pathlib import Path

from app.models.document import ResourceKind


class FileProcessor:
    """Classify uploads and derive their storage names."""

    DEFAULT_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.pdf', '.doc', '.docx', '.txt'}
    _UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

    @staticmethod
    def classify_resource_kind(mime_type: Optional[str]) -> ResourceKind:
        """
        Decide how storage should treat a payload from its declared MIME type.

        Anything under ``image/`` is an image; everything else is stored raw.
        ``ResourceKind.AUTO`` is never produced here.
        """
        if mime_type and mime_type.lower().startswith("image/"):
            return ResourceKind.IMAGE
        return ResourceKind.RAW

    @staticmethod
    def sanitize_stem(filename: str) -> str:
        """Strip the extension and any characters unsafe in a storage key."""
        stem = FileProcessor._UNSAFE_CHARS.sub("-", Path(filename).stem).strip("-.")
        return stem or "file"

    @staticmethod
    def build_storage_name(filename: str, timestamp_ms: Optional[int] = None) -> str:
        """
        Build ``<epoch millis>-<sanitized stem>`` for a new object.

        The timestamp prefix only lowers the chance of collisions; two uploads
        of the same name within one millisecond still collide and are caught
        by the unique constraint on ``storage_key``.
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{timestamp_ms}-{FileProcessor.sanitize_stem(filename)}"

    @staticmethod
    def is_supported(filename: str, allowed: Optional[Iterable[str]] = None) -> bool:
        """Check if a file format is supported."""
        if allowed is None:
            extensions = FileProcessor.DEFAULT_EXTENSIONS
        else:
            extensions = {"." + ext.lower().lstrip(".") for ext in allowed}
        extension = Path(filename).suffix.lower()
        return extension in extensions
