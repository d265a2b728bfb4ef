"""
PlantCare AI - Data Models
SQLAlchemy key-value table backing the result store, and the records kept in it.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from flask_sqlalchemy import SQLAlchemy

from services.results import DiagnosisResult

db = SQLAlchemy()


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class StorageEntry(db.Model):
    """
    One durable key holding a JSON document.
    The result store keeps each capped collection as a JSON array under its own key.
    """
    __tablename__ = "storage_entries"

    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<StorageEntry key='{self.key}' bytes={len(self.value or '')}>"


@dataclass(frozen=True)
class ScanRecord:
    """A completed plant scan. Never mutated after creation."""
    id: str
    timestamp: int
    image_preview_url: str
    diagnosis: DiagnosisResult
    original_prompt: str = ""

    @classmethod
    def create(cls, image_preview_url: str, diagnosis: DiagnosisResult,
               original_prompt: str) -> "ScanRecord":
        now = datetime.now(timezone.utc)
        return cls(
            # time-derived, with a short random suffix so two scans in one tick differ
            id=f"{now.isoformat()}-{uuid.uuid4().hex[:6]}",
            timestamp=int(now.timestamp() * 1000),
            image_preview_url=image_preview_url,
            diagnosis=diagnosis,
            original_prompt=original_prompt,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":              self.id,
            "timestamp":       self.timestamp,
            "imagePreviewUrl": self.image_preview_url,
            "diagnosis":       self.diagnosis.to_dict(),
            "originalPrompt":  self.original_prompt,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanRecord":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            image_preview_url=data.get("imagePreviewUrl", ""),
            diagnosis=DiagnosisResult.from_dict(data.get("diagnosis") or {}),
            original_prompt=data.get("originalPrompt", ""),
        )


@dataclass(frozen=True)
class CommunityPost:
    id: str
    image_url: str
    caption: str
    timestamp: int = field(default_factory=_now_ms)

    @classmethod
    def create(cls, image_url: str, caption: str) -> "CommunityPost":
        return cls(id=f"post-{uuid.uuid4().hex[:12]}", image_url=image_url, caption=caption)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":        self.id,
            "imageUrl":  self.image_url,
            "caption":   self.caption,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommunityPost":
        return cls(
            id=str(data["id"]),
            image_url=data.get("imageUrl", ""),
            caption=data.get("caption", ""),
            timestamp=int(data["timestamp"]),
        )
