"""
Context Resolver
----------------
Turns a listing identifier into a ListingContext (crop + farm + owner) with a
single remote lookup. The owner id it yields is the input of the eligibility
check, so callers must await this before asking for verification status.

Two interchangeable lookup strategies sit behind ListingLookup:
- CropIdLookup:   identifier is the crop record id
- UserCropLookup: identifier is "<userId>/<cropName>"
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from cropverify.clients.http import body_message, get_json
from cropverify.core.errors import ConfigurationError, ContextUnavailable
from cropverify.observability.logging import log
from cropverify.settings import settings
from cropverify.store.models import GeoPoint, ListingContext


def _format_number(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def _quantity_display(record: Dict[str, Any]) -> str:
    quantity = record.get("quantity")
    measure = record.get("measure")
    if quantity:
        return f"{_format_number(quantity)} {measure}" if measure else _format_number(quantity)
    if measure:
        return str(measure)
    return ""


def _will_dry_display(v: Any) -> str:
    if v is True:
        return "Yes"
    if v is False:
        return "No"
    return ""


def _farm_location(farm: Dict[str, Any]) -> Optional[GeoPoint]:
    # GeoJSON point: coordinates = [lng, lat]
    geometry = farm.get("coordinates")
    coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    try:
        return GeoPoint(lat=float(coords[1]), lng=float(coords[0]))
    except (TypeError, ValueError):
        return None


def _text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def map_crop_record(identifier: str, record: Any) -> ListingContext:
    """Map a remote crop record into a ListingContext. Raises ContextUnavailable on a malformed record."""
    if not isinstance(record, dict):
        raise ContextUnavailable()
    farm = record.get("farm")
    user = farm.get("user") if isinstance(farm, dict) else None
    if not isinstance(user, dict) or not user.get("id"):
        raise ContextUnavailable()

    try:
        moisture = record.get("moisturePercent")
        return ListingContext(
            identifier=identifier,
            ownerId=_text(user["id"]),
            fullName=_text(user.get("name")),
            phone=_text(user.get("mobileNumber")).replace("+91", "", 1),
            village=_text(farm.get("village")),
            taluk=_text(farm.get("taluk")),
            district=_text(farm.get("district")),
            cropName=_text(record.get("cropName")),
            quantity=_quantity_display(record),
            variety=_text(record.get("maizeVariety") or record.get("otherVarietyName")),
            moisture=_format_number(moisture) if moisture is not None else "",
            willDry=_will_dry_display(record.get("willYouDryIt")),
            location=_farm_location(farm),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ContextUnavailable() from e


class ListingLookup:
    """Fetch the raw crop record for an identifier. Returns (listing id, record)."""

    async def fetch(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        raise NotImplementedError


def _unwrap(body: Any) -> Any:
    if not isinstance(body, dict) or body.get("code") != 200 or not body.get("data"):
        raise ContextUnavailable(body_message(body))
    return body["data"]


class CropIdLookup(ListingLookup):
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.CROP_API_URL).rstrip("/")
        self.client = client

    async def fetch(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        url = f"{self.base_url}/crop/get-crop-by-id/{quote(identifier, safe='')}"
        _, body = await get_json(url, client=self.client)
        return identifier, _unwrap(body)


class UserCropLookup(ListingLookup):
    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.CROP_API_URL).rstrip("/")
        self.client = client

    async def fetch(self, identifier: str) -> Tuple[str, Dict[str, Any]]:
        user_id, _, crop_name = identifier.partition("/")
        if not user_id or not crop_name:
            raise ConfigurationError()
        url = f"{self.base_url}/crop/get-crops-by-user/{quote(user_id, safe='')}"
        _, body = await get_json(url, client=self.client)
        records = _unwrap(body)
        if not isinstance(records, list):
            raise ContextUnavailable()
        for record in records:
            if isinstance(record, dict) and _text(record.get("cropName")).lower() == crop_name.lower():
                return str(record.get("id") or identifier), record
        raise ContextUnavailable()


def default_lookup(client: Optional[httpx.AsyncClient] = None) -> ListingLookup:
    if settings.LOOKUP_STRATEGY == "user_crop":
        return UserCropLookup(client=client)
    return CropIdLookup(client=client)


class ContextResolver:
    def __init__(self, lookup: Optional[ListingLookup] = None):
        self.lookup = lookup or default_lookup()

    async def resolve(self, identifier: Optional[str]) -> ListingContext:
        if not identifier or not identifier.strip():
            raise ConfigurationError()
        identifier = identifier.strip()
        try:
            listing_id, record = await self.lookup.fetch(identifier)
        except httpx.HTTPError as e:
            log(event="context_unavailable", identifier=identifier, errorType=type(e).__name__, error=str(e)[:300])
            raise ContextUnavailable() from e
        except ContextUnavailable as e:
            log(event="context_unavailable", identifier=identifier, error=e.message)
            raise

        try:
            ctx = map_crop_record(listing_id, record)
        except ContextUnavailable:
            log(event="context_unavailable", identifier=identifier, error="malformed_record")
            raise

        log(
            event="context_resolved",
            identifier=ctx.identifier,
            ownerId=ctx.ownerId,
            cropName=ctx.cropName,
            isMaize=ctx.isMaize,
            hasLocation=ctx.location is not None,
        )
        return ctx
