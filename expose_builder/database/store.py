"""
Exposé store

Saves drafts under a file name generated from address and label. The
file name is unique: saving a second draft under an existing name fails
before anything is written.
"""
import logging
import re
import uuid
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from ..models.expose import SavedExpose, normalize_record
from ..services.i18n import translate
from .database import create_db_engine, create_session_factory, init_db
from .models import SavedExposeRow, utcnow

LOGGER = logging.getLogger(__name__)


class ExposeValidationError(Exception):
    """Raised when address or label is missing"""
    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class DuplicateFileNameError(Exception):
    """Raised when another draft already uses the generated file name"""
    def __init__(self, file_name: str, message: str = None):
        self.file_name = file_name
        self.message = message or translate('store.duplicate_name')
        super().__init__(self.message)


def _clean(text: str) -> str:
    text = re.sub(r'[^a-zA-Z0-9\s]', '', text or '').strip()
    return re.sub(r'\s+', '_', text)


def generate_file_name(address: str, label: str) -> str:
    """'Hauptstr. 5, Berlin' + 'Angebot A' -> 'hauptstr_5_berlin_angebot_a'"""
    return f"{_clean(address)}_{_clean(label)}".lower()


class ExposeStore:
    """CRUD for saved exposé drafts"""

    def __init__(self, url: str = None, engine=None):
        """
        Initialize the store

        Args:
            url: SQLAlchemy database URL (uses config if not provided)
            engine: Pre-built engine (takes precedence over url)
        """
        self.engine = engine or create_db_engine(url)
        init_db(self.engine)
        self.SessionLocal = create_session_factory(self.engine)

    generate_file_name = staticmethod(generate_file_name)

    def file_name_exists(self, file_name: str, exclude_id: Optional[str] = None) -> bool:
        with self.SessionLocal() as db:
            query = db.query(SavedExposeRow.id).filter(SavedExposeRow.file_name == file_name)
            if exclude_id:
                query = query.filter(SavedExposeRow.id != exclude_id)
            return query.first() is not None

    def save(
        self,
        expose_id: Optional[str],
        address: str,
        label: str,
        record: Dict[str, str],
        photos: Sequence[str] = ()
    ) -> str:
        """
        Create or update a draft

        Args:
            expose_id: Id of the draft to update, or None for a new one
            address: Property address (part of the file name)
            label: User chosen label (part of the file name)
            record: PropertyRecord
            photos: Photo data URIs in collection order

        Returns:
            The draft id

        Raises:
            ExposeValidationError: address or label is empty
            DuplicateFileNameError: another draft uses the same file name
        """
        address = (address or '').strip()
        label = (label or '').strip()
        if not address:
            raise ExposeValidationError(translate('store.address_required'), field='address')
        if not label:
            raise ExposeValidationError(translate('store.label_required'), field='label')

        file_name = generate_file_name(address, label)
        if self.file_name_exists(file_name, exclude_id=expose_id):
            raise DuplicateFileNameError(file_name)

        draft_id = expose_id or uuid.uuid4().hex
        with self.SessionLocal() as db:
            row = db.get(SavedExposeRow, draft_id)
            if row is None:
                row = SavedExposeRow(id=draft_id)
                db.add(row)

            row.file_name = file_name
            row.address = address
            row.label = label
            row.set_data(normalize_record(record))
            row.set_photos(photos or ())
            row.updated_at = utcnow()

            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateFileNameError(file_name) from e

        LOGGER.info("saved expose %s as %s (%d photos)", draft_id, file_name, len(photos or ()))
        return draft_id

    def load(self, expose_id: str) -> Optional[SavedExpose]:
        with self.SessionLocal() as db:
            row = db.get(SavedExposeRow, expose_id)
            return row.to_saved() if row else None

    def list(self) -> List[SavedExpose]:
        """All drafts, most recently updated first"""
        with self.SessionLocal() as db:
            rows = (
                db.query(SavedExposeRow)
                .order_by(SavedExposeRow.updated_at.desc(), SavedExposeRow.file_name)
                .all()
            )
            return [row.to_saved() for row in rows]

    def delete(self, expose_id: str) -> bool:
        with self.SessionLocal() as db:
            row = db.get(SavedExposeRow, expose_id)
            if row is None:
                return False
            db.delete(row)
            db.commit()
        LOGGER.info("deleted expose %s", expose_id)
        return True

    def copy(self, expose_id: str, new_label: str) -> Optional[str]:
        """
        Save a copy of a draft under a new label

        Returns:
            The new draft id, or None when the source does not exist

        Raises:
            ExposeValidationError, DuplicateFileNameError: as for save()
        """
        source = self.load(expose_id)
        if source is None:
            return None
        return self.save(None, source.address, new_label, source.data, source.photos)
