import asyncio
import pytest
import httpx
from unittest.mock import patch
from cropverify.clients.listing import (
    ContextResolver,
    CropIdLookup,
    UserCropLookup,
    default_lookup,
    map_crop_record,
)
from cropverify.core.errors import ConfigurationError, ContextUnavailable
from cropverify.settings import settings

MAIZE_RECORD = {
    "id": "crop-1",
    "cropName": "Maize",
    "quantity": 50,
    "measure": "bags",
    "maizeVariety": "Hybrid",
    "moisturePercent": 18,
    "willYouDryIt": True,
    "farm": {
        "village": "Hosahalli",
        "taluk": "Hunsur",
        "district": "Mysuru",
        "coordinates": {"type": "Point", "coordinates": [76.25, 12.31]},
        "user": {"id": "user-9", "name": "Ravi Kumar", "mobileNumber": "+919876543210"},
    },
}


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _resolver(handler):
    return ContextResolver(CropIdLookup(base_url="http://crop.test", client=_client(handler)))


def test_maize_record_maps_display_fields():
    ctx = map_crop_record("crop-1", MAIZE_RECORD)

    assert ctx.ownerId == "user-9"
    assert ctx.quantity == "50 bags"
    assert ctx.variety == "Hybrid"
    assert ctx.moisture == "18"
    assert ctx.willDry == "Yes"
    assert ctx.isMaize is True
    # "+91" is stripped from the national number
    assert ctx.phone == "9876543210"
    # GeoJSON coordinates are [lng, lat]
    assert ctx.location.lat == 12.31
    assert ctx.location.lng == 76.25


def test_non_maize_record_keeps_other_variety():
    record = dict(MAIZE_RECORD, cropName="Ragi", maizeVariety=None, otherVarietyName="GPU-28",
                  moisturePercent=None, willYouDryIt=None, quantity=12.0, measure="quintal")
    ctx = map_crop_record("crop-2", record)

    assert ctx.isMaize is False
    assert ctx.variety == "GPU-28"
    assert ctx.quantity == "12 quintal"
    assert ctx.moisture == ""
    assert ctx.willDry == ""


def test_record_without_owner_is_unavailable():
    record = dict(MAIZE_RECORD, farm={"village": "x"})
    with pytest.raises(ContextUnavailable):
        map_crop_record("crop-1", record)


def test_resolve_hits_crop_endpoint():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json={"code": 200, "data": MAIZE_RECORD})

    ctx = asyncio.run(_resolver(handler).resolve("crop-1"))
    assert seen == ["http://crop.test/crop/get-crop-by-id/crop-1"]
    assert ctx.identifier == "crop-1"
    assert ctx.cropName == "Maize"


@pytest.mark.parametrize("identifier", ["", "   ", None])
def test_resolve_empty_identifier_is_configuration_error(identifier):
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(ConfigurationError):
        asyncio.run(_resolver(handler).resolve(identifier))


def test_resolve_non_200_code_is_unavailable():
    def handler(request):
        return httpx.Response(200, json={"code": 404, "message": "Crop not found"})

    with pytest.raises(ContextUnavailable) as ei:
        asyncio.run(_resolver(handler).resolve("missing"))
    assert ei.value.remote_message == "Crop not found"


def test_resolve_transport_error_is_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ContextUnavailable):
        asyncio.run(_resolver(handler).resolve("crop-1"))


def test_user_crop_lookup_matches_crop_name():
    other = dict(MAIZE_RECORD, id="crop-7", cropName="Ragi")

    def handler(request):
        assert request.url.path == "/crop/get-crops-by-user/user-9"
        return httpx.Response(200, json={"code": 200, "data": [other, MAIZE_RECORD]})

    lookup = UserCropLookup(base_url="http://crop.test", client=_client(handler))
    ctx = asyncio.run(ContextResolver(lookup).resolve("user-9/maize"))
    assert ctx.identifier == "crop-1"
    assert ctx.cropName == "Maize"


def test_user_crop_lookup_needs_both_parts():
    lookup = UserCropLookup(base_url="http://crop.test", client=_client(lambda r: httpx.Response(500)))
    with pytest.raises(ConfigurationError):
        asyncio.run(ContextResolver(lookup).resolve("user-9"))


def test_default_lookup_follows_setting(monkeypatch):
    monkeypatch.setattr(settings, "LOOKUP_STRATEGY", "user_crop")
    assert isinstance(default_lookup(), UserCropLookup)
    monkeypatch.setattr(settings, "LOOKUP_STRATEGY", "crop_id")
    assert isinstance(default_lookup(), CropIdLookup)


@pytest.mark.parametrize(
    "record, field, expected",
    [
        ({"cropName": "Maize", "farm": {"user": {"id": "u1", "mobileNumber": 919876543210}}}, "phone", "919876543210"),
        ({"cropName": 42, "farm": {"user": {"id": "u1"}}}, "cropName", "42"),
        ({"cropName": "Maize", "farm": {"village": 7, "user": {"id": 15, "name": None}}}, "village", "7"),
    ],
)
def test_wrongly_typed_fields_are_coerced(record, field, expected):
    def handler(request):
        return httpx.Response(200, json={"code": 200, "data": record})

    ctx = asyncio.run(_resolver(handler).resolve("X1"))
    assert getattr(ctx, field) == expected


@patch("cropverify.clients.listing._farm_location", side_effect=TypeError("bad geometry"))
def test_mapping_type_error_is_unavailable(mock_location):
    def handler(request):
        return httpx.Response(200, json={"code": 200, "data": MAIZE_RECORD})

    with pytest.raises(ContextUnavailable):
        asyncio.run(_resolver(handler).resolve("X1"))
    assert mock_location.called
