"""
Photo collection and upload batch results
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..services.i18n import translate
from ..utils.formatting import parse_number

MAX_PHOTOS = 12


@dataclass(frozen=True)
class PhotoCollection:
    """
    Ordered, capped sequence of processed photos (JPEG data URIs).

    Every operation returns a new collection; index 0 is the default cover.
    Invalid indices leave the collection unchanged.
    """
    photos: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'photos', tuple(self.photos)[:MAX_PHOTOS])

    def __len__(self) -> int:
        return len(self.photos)

    def __iter__(self) -> Iterator[str]:
        return iter(self.photos)

    def __getitem__(self, index):
        return self.photos[index]

    def _valid(self, index: int) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.photos)

    @property
    def remaining(self) -> int:
        return MAX_PHOTOS - len(self.photos)

    def to_list(self) -> List[str]:
        return list(self.photos)

    def plan_batch(self, batch_size: int, reserved: int = 0) -> Tuple[int, int]:
        """
        Split an upload batch into (accepted, dropped) before any processing.

        Args:
            batch_size: Number of files selected by the user
            reserved: Slots already promised to batches still in flight
        """
        free = max(0, self.remaining - reserved)
        accepted = min(max(0, batch_size), free)
        return accepted, max(0, batch_size) - accepted

    def extend(self, assets: Iterable[str]) -> 'PhotoCollection':
        """Append assets up to the cap; the overflow is discarded"""
        assets = list(assets)[:self.remaining]
        return PhotoCollection(self.photos + tuple(assets))

    def move(self, source: int, target: int) -> 'PhotoCollection':
        """Drag-and-drop: take the photo at `source` and insert it at `target`"""
        if not self._valid(source) or not self._valid(target) or source == target:
            return self
        items = list(self.photos)
        item = items.pop(source)
        items.insert(target, item)
        return PhotoCollection(items)

    def step(self, index: int, direction: int) -> 'PhotoCollection':
        """Swap with the left (direction < 0) or right (direction > 0) neighbour"""
        target = index + (1 if direction > 0 else -1)
        if not self._valid(index) or not self._valid(target):
            return self
        items = list(self.photos)
        items[index], items[target] = items[target], items[index]
        return PhotoCollection(items)

    def remove(self, index: int) -> 'PhotoCollection':
        if not self._valid(index):
            return self
        items = list(self.photos)
        del items[index]
        return PhotoCollection(items)

    def remove_selected(self, indices: Iterable[int]) -> 'PhotoCollection':
        selected = set(indices)
        return PhotoCollection(p for i, p in enumerate(self.photos) if i not in selected)

    def promote(self, index: int) -> 'PhotoCollection':
        """Move a photo to the front so it becomes the cover"""
        if not self._valid(index) or index == 0:
            return self
        return self.move(index, 0)

    def cover_index(self, title_index: Any = None) -> Optional[int]:
        """Index of the cover photo: a valid override, else 0; None when empty"""
        if not self.photos:
            return None
        number = parse_number(title_index)
        if number is not None and number == int(number) and self._valid(int(number)):
            return int(number)
        return 0

    def cover(self, title_index: Any = None) -> Optional[str]:
        index = self.cover_index(title_index)
        return None if index is None else self.photos[index]


@dataclass
class PhotoBatchResult:
    """Result of one upload batch"""
    requested: int = 0
    accepted: int = 0
    dropped: int = 0
    assets: List[str] = field(default_factory=list)
    failures: List[Dict[str, Any]] = field(default_factory=list)

    def add_success(self, asset: str):
        self.assets.append(asset)

    def add_failure(self, name: str, error: str):
        self.failures.append({'name': name, 'error': error, 'status': 'failed'})

    @property
    def processed(self) -> int:
        return len(self.assets)

    def message(self, lang: Optional[str] = None) -> Optional[str]:
        """User facing capacity message, or None when the whole batch fit"""
        if self.requested and not self.accepted:
            return translate('photos.limit_reached', lang, limit=MAX_PHOTOS)
        if self.dropped:
            return translate(
                'photos.partially_accepted', lang,
                accepted=self.accepted, requested=self.requested, limit=MAX_PHOTOS,
            )
        return None

    def to_dict(self, lang: Optional[str] = None) -> Dict[str, Any]:
        return {
            'requested': self.requested,
            'accepted': self.accepted,
            'dropped': self.dropped,
            'processed': self.processed,
            'failed': len(self.failures),
            'failures': self.failures,
            'message': self.message(lang),
        }

    def __str__(self):
        return (f"PhotoBatchResult(requested={self.requested}, accepted={self.accepted}, "
                f"processed={self.processed}, failed={len(self.failures)})")
