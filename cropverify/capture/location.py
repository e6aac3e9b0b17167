from typing import Optional

from cropverify.core.errors import LocationUnavailable
from cropverify.settings import settings
from cropverify.store.models import GeoPoint


class LocationProvider:
    async def current_position(self) -> GeoPoint:
        """One-shot reading. Raises LocationUnavailable on denial or absence."""
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Fixed position (DEVICE_LAT / DEVICE_LNG) for installations without a GPS fix."""

    def __init__(self, point: Optional[GeoPoint] = None):
        if point is None and settings.DEVICE_LAT is not None and settings.DEVICE_LNG is not None:
            point = GeoPoint(lat=settings.DEVICE_LAT, lng=settings.DEVICE_LNG)
        self.point = point

    async def current_position(self) -> GeoPoint:
        if self.point is None:
            raise LocationUnavailable("no position configured")
        return self.point
