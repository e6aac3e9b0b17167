"""
Submission Payload Builder
--------------------------
Multipart fields for POST /verifications/submit.

- cropId + owner display fields + quantity + variety always go out;
- moisture / willDry only for maize, and only when non-empty;
- location is JSON ("null" when no reading was taken);
- photos are repeated "photos" file parts in capture order.
"""

from __future__ import annotations

import json
from typing import Dict, List, Sequence

from cropverify.clients.verification import FilePart
from cropverify.store.models import ListingContext

REQUIRED_FIELDS = ("cropId", "fullName", "phone", "village", "taluk", "district", "quantity", "variety", "location")
MAIZE_FIELDS = ("moisture", "willDry")


def build_submission_fields(ctx: ListingContext) -> Dict[str, str]:
    fields: Dict[str, str] = {
        "cropId": ctx.identifier,
        "fullName": ctx.fullName,
        "phone": ctx.phone,
        "village": ctx.village,
        "taluk": ctx.taluk,
        "district": ctx.district,
        "quantity": ctx.quantity,
        "variety": ctx.variety,
    }
    if ctx.isMaize and ctx.moisture:
        fields["moisture"] = ctx.moisture
    if ctx.isMaize and ctx.willDry:
        fields["willDry"] = ctx.willDry
    fields["location"] = json.dumps(ctx.location.as_dict() if ctx.location else None)
    return fields


def build_photo_parts(blobs: Sequence[bytes], stamp_ms: int) -> List[FilePart]:
    return [
        ("photos", (f"photo-{stamp_ms}-{i + 1}.jpg", blob, "image/jpeg"))
        for i, blob in enumerate(blobs)
    ]
