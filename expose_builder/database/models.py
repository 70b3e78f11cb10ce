"""
Saved Exposé Model

One row per draft. Property data and photos are stored as JSON text.
"""
import json
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import Column, String, DateTime, Text

from ..models.expose import SavedExpose
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SavedExposeRow(Base):
    """Stored exposé draft"""
    __tablename__ = 'saved_exposes'

    id = Column(String(32), primary_key=True)
    file_name = Column(String(255), unique=True, nullable=False, index=True)
    address = Column(String(500), nullable=False)
    label = Column(String(255), nullable=False)

    data = Column(Text, default='{}')     # JSON object (PropertyRecord)
    photos = Column(Text, default='[]')   # JSON array of data URIs

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def get_data(self) -> Dict[str, str]:
        if not self.data:
            return {}
        try:
            return json.loads(self.data)
        except ValueError:
            return {}

    def set_data(self, data: Dict[str, str]):
        self.data = json.dumps(data, ensure_ascii=False)

    def get_photos(self) -> List[str]:
        if not self.photos:
            return []
        try:
            return json.loads(self.photos)
        except ValueError:
            return []

    def set_photos(self, photos: List[str]):
        self.photos = json.dumps(list(photos))

    def to_saved(self) -> SavedExpose:
        return SavedExpose(
            id=self.id,
            file_name=self.file_name,
            address=self.address,
            label=self.label,
            created_at=self.created_at.isoformat() if self.created_at else '',
            updated_at=self.updated_at.isoformat() if self.updated_at else '',
            data=self.get_data(),
            photos=self.get_photos(),
        )

    def __repr__(self):
        return f"<SavedExposeRow {self.id} {self.file_name}>"
