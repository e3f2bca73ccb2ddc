"""Data records stored and returned by the file sharing service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class FileRecord:
    """Metadata of one uploaded file."""

    id: int
    user_email: str
    file_name: str
    size: int
    url: str
    upload_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a JSON-ready mapping."""
        return {
            "id": self.id,
            "user_email": self.user_email,
            "file_name": self.file_name,
            "size": self.size,
            "url": self.url,
            "upload_at": self.upload_at.isoformat(),
        }