"""
Submission Pipeline
-------------------
Preconditions (checked in order, first failure wins):
1) at least one photo            -> NoPhotoCaptured
2) listing identifier present    -> ConfigurationError
3) eligibility, if known, allows -> SubmissionBlocked(blockMessage)

Then every photo is size-reduced (concurrently; all must finish before the
request is assembled), the multipart request goes out exactly once, and the
response is mapped:

- 409                               -> SubmissionBlocked(body message)
- 2xx + statusCode == 200           -> SubmissionResult
- anything else / no response       -> SubmissionFailed
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

import httpx
from starlette.concurrency import run_in_threadpool

from cropverify.clients.http import body_message
from cropverify.clients.verification import post_submission
from cropverify.core.errors import ConfigurationError, NoPhotoCaptured, SubmissionBlocked, SubmissionFailed
from cropverify.observability.logging import log
import cropverify.observability.metrics as metrics
from cropverify.store.models import CapturedPhoto, EligibilityState, ListingContext
from cropverify.submission.compress import compress_image
from cropverify.submission.payload import build_photo_parts, build_submission_fields
from cropverify.utils.time import now_ms

Compressor = Callable[[bytes], bytes]


@dataclass
class SubmissionResult:
    isResubmission: bool = False
    recordId: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


def check_preconditions(
    ctx: Optional[ListingContext],
    photos: Sequence[CapturedPhoto],
    eligibility: Optional[EligibilityState],
) -> None:
    if not photos:
        raise NoPhotoCaptured()
    if ctx is None or not ctx.identifier:
        raise ConfigurationError(message_key="errors.cropIdMissing")
    if eligibility is not None and not eligibility.canSubmit:
        raise SubmissionBlocked(eligibility.blockMessage)


def interpret_response(resp: httpx.Response) -> SubmissionResult:
    try:
        body = resp.json()
    except ValueError:
        body = None

    if resp.status_code == 409:
        raise SubmissionBlocked(body_message(body), message_key="errors.submissionBlocked")

    if resp.is_success and isinstance(body, dict) and body.get("statusCode") == 200:
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        record_id = data.get("id") or data.get("verificationId")
        return SubmissionResult(
            isResubmission=bool(data.get("isResubmission")),
            recordId=str(record_id) if record_id is not None else None,
            data=data,
        )

    raise SubmissionFailed(body_message(body))


async def _compress_all(photos: Sequence[CapturedPhoto], compressor: Compressor):
    return await asyncio.gather(*(run_in_threadpool(compressor, p.data) for p in photos))


async def submit_evidence(
    ctx: Optional[ListingContext],
    photos: Sequence[CapturedPhoto],
    eligibility: Optional[EligibilityState],
    *,
    compressor: Compressor = compress_image,
    client: Optional[httpx.AsyncClient] = None,
) -> SubmissionResult:
    check_preconditions(ctx, photos, eligibility)

    try:
        blobs = await _compress_all(photos, compressor)
    except (OSError, ValueError) as e:
        log(event="submission_exception", stage="compress", errorType=type(e).__name__, error=str(e)[:300])
        metrics.increment_submission_failed()
        raise SubmissionFailed(message_key="errors.submitError") from e

    fields = build_submission_fields(ctx)
    files = build_photo_parts(blobs, now_ms())

    metrics.increment_submission_attempt()
    log(
        event="submission_attempt",
        cropId=ctx.identifier,
        photoCount=len(files),
        photoBytes=sum(len(b) for b in blobs),
        fieldNames=sorted(fields.keys()),
        hasLocation=ctx.location is not None,
    )

    start = time.time()
    try:
        resp = await post_submission(fields, files, client=client)
    except httpx.HTTPError as e:
        log(event="submission_exception", stage="transport", errorType=type(e).__name__, error=str(e)[:300])
        metrics.increment_submission_failed()
        raise SubmissionFailed(message_key="errors.submitError") from e
    metrics.record_submission_latency(int((time.time() - start) * 1000))

    try:
        result = interpret_response(resp)
    except SubmissionBlocked as e:
        log(event="submission_blocked", cropId=ctx.identifier, statusCode=int(resp.status_code), message=e.message)
        metrics.increment_submission_blocked()
        raise
    except SubmissionFailed as e:
        log(
            event="submission_failed",
            cropId=ctx.identifier,
            statusCode=int(resp.status_code),
            message=e.message,
            responseText=(resp.text or "")[:500],
        )
        metrics.increment_submission_failed()
        raise

    metrics.increment_submission_success()
    log(event="submission_success", cropId=ctx.identifier, recordId=result.recordId)
    if result.isResubmission:
        log(event="submission_resubmission", cropId=ctx.identifier, recordId=result.recordId)
    return result
