from typing import Optional, Tuple

from cropverify.observability.logging import log
from cropverify.settings import settings
from cropverify.store.models import CapturedPhoto
from cropverify.utils.time import now_ms

Photos = Tuple[CapturedPhoto, ...]


def _reindex(photos) -> Photos:
    return tuple(CapturedPhoto(index=i, data=p.data, capturedAtMs=p.capturedAtMs) for i, p in enumerate(photos))


class PhotoSet:
    """
    Ordered, bounded set of captured stills.
    INVARIANT: 0 <= len <= max_photos, capture order, index == position.
    Every operation returns the new sequence.
    """

    def __init__(self, max_photos: Optional[int] = None):
        self.max_photos = int(max_photos or settings.MAX_PHOTOS)
        self._photos: Photos = ()

    @property
    def photos(self) -> Photos:
        return self._photos

    @property
    def is_full(self) -> bool:
        return len(self._photos) >= self.max_photos

    def __len__(self) -> int:
        return len(self._photos)

    def append(self, data: bytes, captured_at_ms: Optional[int] = None) -> Photos:
        # The UI hides the trigger at the cap; this is the last line of enforcement
        if self.is_full:
            log(event="photo_append_rejected", count=len(self._photos), maxPhotos=self.max_photos)
            return self._photos
        photo = CapturedPhoto(index=len(self._photos), data=data, capturedAtMs=captured_at_ms or now_ms())
        self._photos = self._photos + (photo,)
        return self._photos

    def remove_last(self) -> Photos:
        if self._photos:
            self._photos = self._photos[:-1]
        return self._photos

    def remove_at(self, index: int) -> Photos:
        if not 0 <= index < len(self._photos):
            raise IndexError(f"no photo at index {index}")
        self._photos = _reindex(p for i, p in enumerate(self._photos) if i != index)
        return self._photos
