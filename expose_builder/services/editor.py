"""
Editing state and the session that serialises changes to it.

`apply_edit` is the single transaction every field change goes through:
values are normalised, edits to derived keys are dropped and the derived
fields are recomputed before the new state is returned.
"""
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..images.processor import ImageProcessor
from ..images.watermark import WatermarkStyle
from ..models.expose import (
    DERIVED_FIELDS,
    EnergyCertificateInfo,
    OptimizationSettings,
    new_record,
    normalize_record,
)
from ..models.photos import PhotoBatchResult, PhotoCollection
from .assembly import palette_for
from .calculator import recompute
from .energy_certificate import CertificateParser, merge_certificate, parse_certificate_safely

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExposeState:
    """Everything one exposé draft consists of"""
    record: Dict[str, str] = field(default_factory=lambda: recompute(new_record()))
    photos: PhotoCollection = field(default_factory=PhotoCollection)
    settings: OptimizationSettings = field(default_factory=OptimizationSettings)
    logo: Optional[str] = None
    theme: str = 'blue'
    watermark_uploads: bool = True

    def upload_watermark(self) -> Optional[WatermarkStyle]:
        """Watermark burnt into new uploads: the watermark text, else the contact name"""
        if not self.watermark_uploads:
            return None
        text = self.record.get('watermark_text') or self.record.get('kontakt_name') or ''
        if not text.strip():
            return None
        return WatermarkStyle(text=text, opacity=0.3, font_size=24, color=palette_for(self.theme)['primary'])


def apply_edit(state: ExposeState, changes: Dict[str, Any]) -> ExposeState:
    record = dict(state.record)
    for key, value in normalize_record(changes).items():
        if key in DERIVED_FIELDS:
            LOGGER.debug("ignoring edit of derived field %s", key)
            continue
        record[key] = value
    return replace(state, record=recompute(record))


def apply_energy_certificate(state: ExposeState, info: EnergyCertificateInfo) -> ExposeState:
    return replace(state, record=recompute(merge_certificate(state.record, info)))


class ExposeSession:
    """
    Lock protected holder of the current ExposeState.

    Every mutation is applied atomically to the state current at that
    moment. Photo uploads run the pipeline outside the lock, so the user
    can keep reordering or removing photos while a batch is processed.
    """

    def __init__(self, state: ExposeState = None, processor: ImageProcessor = None):
        self._lock = threading.Lock()
        self._state = state or ExposeState()
        self._reserved = 0
        self.processor = processor or ImageProcessor()

    @property
    def state(self) -> ExposeState:
        with self._lock:
            return self._state

    def _mutate(self, change: Callable[[ExposeState], ExposeState]) -> ExposeState:
        with self._lock:
            self._state = change(self._state)
            return self._state

    def edit(self, changes: Dict[str, Any]) -> ExposeState:
        return self._mutate(lambda s: apply_edit(s, changes))

    def update_settings(self, data: Dict[str, Any]) -> ExposeState:
        """Later batches use the new settings; a batch in flight keeps its own"""
        merged = {**self.state.settings.to_dict(), **(data or {})}
        settings = OptimizationSettings.from_dict(merged)
        return self._mutate(lambda s: replace(s, settings=settings))

    def set_theme(self, theme: str) -> ExposeState:
        return self._mutate(lambda s: replace(s, theme=theme or 'blue'))

    def set_logo(self, logo: Optional[str]) -> ExposeState:
        return self._mutate(lambda s: replace(s, logo=logo or None))

    def merge_certificate(self, parser: CertificateParser, document: Any) -> bool:
        """Parse outside the lock, merge atomically; False (state untouched) on parser failure"""
        info = parse_certificate_safely(parser, document)
        if info is None:
            return False
        self._mutate(lambda s: apply_energy_certificate(s, info))
        return True

    # Photo collection operations

    def move_photo(self, source: int, target: int) -> ExposeState:
        return self._mutate(lambda s: replace(s, photos=s.photos.move(source, target)))

    def step_photo(self, index: int, direction: int) -> ExposeState:
        return self._mutate(lambda s: replace(s, photos=s.photos.step(index, direction)))

    def remove_photo(self, index: int) -> ExposeState:
        return self._mutate(lambda s: replace(s, photos=s.photos.remove(index)))

    def remove_selected(self, indices: Iterable[int]) -> ExposeState:
        indices = list(indices)
        return self._mutate(lambda s: replace(s, photos=s.photos.remove_selected(indices)))

    def promote_photo(self, index: int) -> ExposeState:
        return self._mutate(lambda s: replace(s, photos=s.photos.promote(index)))

    def suggest_cover(self) -> Tuple[Optional[int], List[float]]:
        return self.processor.suggest_cover(self.state.photos.to_list())

    def upload_photos(self, files: Iterable[Any]) -> PhotoBatchResult:
        """
        Process an upload batch and append the results.

        Settings and watermark are captured when the batch starts and the
        capacity is reserved from the collection size at that moment. The
        processed photos are appended to whatever the collection looks like
        when the batch completes.
        """
        files = list(files)
        with self._lock:
            snapshot = self._state
            settings = snapshot.settings
            watermark = snapshot.upload_watermark()
            existing = len(snapshot.photos) + self._reserved
            accepted, _ = snapshot.photos.plan_batch(len(files), self._reserved)
            self._reserved += accepted

        result = None
        try:
            result = self.processor.process_batch(files, settings, existing_count=existing, watermark=watermark)
        finally:
            with self._lock:
                self._reserved -= accepted
                if result is not None:
                    self._state = replace(self._state, photos=self._state.photos.extend(result.assets))

        LOGGER.info("upload batch finished: %s", result)
        return result
