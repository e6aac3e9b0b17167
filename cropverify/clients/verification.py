"""
Verification Service Client
---------------------------
Two calls against the verification backend:

- fetch_eligibility(): current verification status for an owner. This is the
  one remote failure that never reaches the user: any error is logged and the
  result is None, which the workflow reads as "submission permitted"
  (fail-open), so an outage of the status service cannot lock farmers out.
- post_submission(): a single multipart POST. No retry here or upstream.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from cropverify.clients.http import get_json
from cropverify.observability.logging import log
import cropverify.observability.metrics as metrics
from cropverify.settings import settings
from cropverify.store.models import BLOCKING_STATUSES, EligibilityState, VerificationStatus

# (field name, (filename, content, content type))
FilePart = Tuple[str, Tuple[str, bytes, str]]


def parse_eligibility(body: Any) -> EligibilityState:
    """Raises ValueError when the payload does not describe a known status."""
    if not isinstance(body, dict) or body.get("statusCode") != 200:
        raise ValueError("status_code_not_200")
    data = body.get("data")
    if not isinstance(data, dict):
        raise ValueError("missing_data")

    verification = data.get("verification") if isinstance(data.get("verification"), dict) else {}
    raw_status = verification.get("status") or VerificationStatus.NONE.value
    status = VerificationStatus(str(raw_status).lower())

    can_submit = status not in BLOCKING_STATUSES
    if "canSubmit" in data and bool(data.get("canSubmit")) != can_submit:
        log(
            event="eligibility_can_submit_mismatch",
            status=status.value,
            remoteCanSubmit=bool(data.get("canSubmit")),
            effectiveCanSubmit=can_submit,
        )

    record_id = verification.get("id")
    return EligibilityState(
        hasExistingRecord=bool(data.get("hasVerification")),
        canSubmit=can_submit,
        status=status,
        blockMessage=data.get("blockMessage") or None,
        existingRecordId=str(record_id) if record_id is not None else None,
    )


async def fetch_eligibility(owner_id: str, *, client: Optional[httpx.AsyncClient] = None) -> Optional[EligibilityState]:
    url = f"{settings.VERIFICATION_STATUS_URL}/{owner_id}/current-status"
    try:
        status_code, body = await get_json(url, client=client)
        if not 200 <= status_code < 300:
            raise ValueError(f"non_2xx:{status_code}")
        state = parse_eligibility(body)
    except (httpx.HTTPError, ValueError) as e:
        log(
            event="eligibility_check_failed",
            ownerId=owner_id,
            errorType=type(e).__name__,
            error=str(e)[:300],
            policy="fail_open",
        )
        metrics.increment_eligibility_fail_open()
        return None

    log(
        event="eligibility_fetched",
        ownerId=owner_id,
        status=state.status.value,
        canSubmit=state.canSubmit,
        hasExistingRecord=state.hasExistingRecord,
    )
    return state


async def post_submission(
    fields: Dict[str, str],
    files: List[FilePart],
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    """POST the multipart submission once. Transport errors propagate as httpx.HTTPError."""
    start = time.time()
    if client is not None:
        resp = await client.post(settings.VERIFICATION_API_URL, data=fields, files=files)
    else:
        async with httpx.AsyncClient(timeout=settings.SUBMIT_TIMEOUT_SEC) as own:
            resp = await own.post(settings.VERIFICATION_API_URL, data=fields, files=files)
    log(
        event="submission_response",
        url=settings.VERIFICATION_API_URL,
        statusCode=int(resp.status_code),
        elapsedMs=int((time.time() - start) * 1000),
    )
    return resp
