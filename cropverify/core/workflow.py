"""
Verification Workflow
---------------------
Sequences the whole capture-and-submit flow as a 3-step wizard and owns the
cross-cutting error/loading state.

    1 review  --start_verification-->  2 capture  --submit (success)-->  3 done
              <------go_back---------

Step 2 internals:
    grant_access -> capture -> retake | capture_another | submit

Rules this class keeps:
- eligibility is fetched only after the listing lookup produced an owner id;
- while the status check is pending, or eligibility forbids it, "start" is disabled;
- the camera is streaming only while step == 2, access was granted and no
  fresh shot is being previewed; every transition re-applies this rule;
- results of in-flight lookups are dropped once the workflow is closed;
- every failure lands in error state (fatal ones in fatalError); nothing escapes.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime
from typing import Awaitable, Callable, Optional

from cropverify.capture.compositor import compose_evidence
from cropverify.capture.device import CaptureDeviceController
from cropverify.capture.location import LocationProvider, StaticLocationProvider
from cropverify.capture.photos import PhotoSet
from cropverify.clients.listing import ContextResolver
from cropverify.clients.verification import fetch_eligibility
from cropverify.core import state_machine as sm
from cropverify.core.errors import DeviceUnavailable, LocationUnavailable, VerificationError
from cropverify.i18n import Messages
from cropverify.observability.logging import log
from cropverify.settings import settings
from cropverify.store.models import EligibilityState, GeoPoint, WorkflowState
from cropverify.submission.pipeline import SubmissionResult, check_preconditions, submit_evidence
from cropverify.utils.time import now_ms

EligibilityFetcher = Callable[[str], Awaitable[Optional[EligibilityState]]]


class VerificationWorkflow:
    def __init__(
        self,
        identifier: Optional[str],
        *,
        resolver: Optional[ContextResolver] = None,
        eligibility_fetcher: EligibilityFetcher = fetch_eligibility,
        device: Optional[CaptureDeviceController] = None,
        compositor=compose_evidence,
        photos: Optional[PhotoSet] = None,
        location: Optional[LocationProvider] = None,
        submitter=submit_evidence,
        messages: Optional[Messages] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.id = uuid.uuid4().hex
        self.identifier = (identifier or "").strip()
        self.resolver = resolver or ContextResolver()
        self.eligibility_fetcher = eligibility_fetcher
        self.device = device or CaptureDeviceController()
        self.compositor = compositor
        self.photo_set = photos or PhotoSet()
        self.location = location or StaticLocationProvider()
        self.submitter = submitter
        self.messages = messages or Messages(settings.DEFAULT_LOCALE)
        self.clock = clock
        self.state = WorkflowState()
        self.closed = False

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _fail(self, err: VerificationError) -> None:
        text = err.localized(self.messages)
        if err.fatal:
            self.state.fatalError = text
            self.state.fatalKind = err.kind
            self.device.release()
        else:
            self.state.error = text
            self.state.errorKind = err.kind
        log(event="workflow_error", workflowId=self.id, kind=err.kind, fatal=err.fatal, step=self.state.step)

    def _drop_stale(self, what: str) -> bool:
        if self.closed:
            log(event="stale_result_dropped", workflowId=self.id, result=what)
            return True
        return False

    def _wants_device(self) -> bool:
        s = self.state
        return (
            not self.closed
            and s.fatalError is None
            and s.step == sm.STEP_CAPTURE
            and s.cameraGranted
            and not s.lastShotPreviewed
        )

    async def _sync_device(self) -> None:
        if not self._wants_device():
            self.device.release()
            return
        try:
            await self.device.acquire()
        except DeviceUnavailable as e:
            self._fail(e)

    def _sync_photos(self) -> None:
        self.state.photos = self.photo_set.photos

    # ------------------------------------------------------------------
    # step 1
    # ------------------------------------------------------------------
    async def load(self) -> None:
        """Resolve the listing, then (strictly after) the owner's eligibility."""
        s = self.state
        s.loading = True
        try:
            ctx = await self.resolver.resolve(self.identifier)
        except VerificationError as e:
            if self._drop_stale("context"):
                return
            s.loading = False
            s.checkingStatus = False
            self._fail(e)
            return
        if self._drop_stale("context"):
            return
        s.loading = False
        s.context = ctx

        eligibility = await self.eligibility_fetcher(ctx.ownerId)
        if self._drop_stale("eligibility"):
            return
        # None = check failed; left unset, which permits submission
        s.eligibility = eligibility
        s.checkingStatus = False

    @property
    def can_start(self) -> bool:
        s = self.state
        if s.step != sm.STEP_REVIEW or s.fatalError or s.loading or s.checkingStatus or s.context is None:
            return False
        return s.eligibility is None or s.eligibility.canSubmit

    def start_verification(self) -> bool:
        s = self.state
        if s.step != sm.STEP_REVIEW:
            return False
        if s.eligibility is not None and not s.eligibility.canSubmit:
            s.error = s.eligibility.blockMessage or self.messages.t("errors.cannotSubmit")
            s.errorKind = "SubmissionBlocked"
            return False
        if not self.can_start:
            log(event="start_suppressed", workflowId=self.id, loading=s.loading, checkingStatus=s.checkingStatus)
            return False
        s.clear_error()
        s.step = sm.STEP_CAPTURE
        log(event="step_changed", workflowId=self.id, step=s.step)
        return True

    # ------------------------------------------------------------------
    # step 2
    # ------------------------------------------------------------------
    def go_back(self) -> bool:
        s = self.state
        if s.step != sm.STEP_CAPTURE or s.submitting:
            return False
        self.device.release()
        s.cameraGranted = False
        s.lastShotPreviewed = False
        s.clear_error()
        s.step = sm.STEP_REVIEW
        log(event="step_changed", workflowId=self.id, step=s.step)
        return True

    async def _read_location(self, reading: Optional[GeoPoint]) -> None:
        try:
            point = reading or await self.location.current_position()
        except LocationUnavailable as e:
            log(event="location_unavailable", workflowId=self.id, error=str(e)[:200])
            # Camera errors take precedence over the location notice
            if self.state.error is None:
                self.state.error = self.messages.t("errors.locationAccess")
                self.state.errorKind = "LocationUnavailable"
            return
        if self._drop_stale("location"):
            return
        if self.state.context is not None:
            self.state.context.location = point

    async def grant_access(self, reading: Optional[GeoPoint] = None) -> None:
        """Camera access + a best-effort location reading, overlapping; neither blocks the other."""
        s = self.state
        if s.step != sm.STEP_CAPTURE:
            return
        s.clear_error()
        s.cameraGranted = True
        await asyncio.gather(self._sync_device(), self._read_location(reading))

    def capture(self) -> bool:
        s = self.state
        if s.step != sm.STEP_CAPTURE or not s.cameraGranted or s.lastShotPreviewed:
            return False
        if self.photo_set.is_full:
            log(event="photo_capture_rejected", workflowId=self.id, reason="max_photos")
            return False
        try:
            frame = self.device.read_frame()
            still = self.compositor(frame, self.clock())
        except DeviceUnavailable as e:
            self._fail(e)
            return False

        before = len(self.photo_set)
        self.photo_set.append(still, now_ms())
        self._sync_photos()
        if len(self.photo_set) == before:
            return False
        # Two effects, same action: the still is kept, then the device goes dark
        self.device.release()
        s.lastShotPreviewed = True
        s.clear_error()
        log(event="photo_captured", workflowId=self.id, count=len(self.photo_set), bytes=len(still))
        return True

    async def retake(self) -> None:
        s = self.state
        if s.step != sm.STEP_CAPTURE or not s.lastShotPreviewed:
            return
        self.photo_set.remove_last()
        self._sync_photos()
        s.lastShotPreviewed = False
        await self._sync_device()

    async def capture_another(self) -> None:
        s = self.state
        if s.step != sm.STEP_CAPTURE or not s.lastShotPreviewed:
            return
        if self.photo_set.is_full:
            log(event="capture_another_rejected", workflowId=self.id, reason="max_photos")
            return
        s.lastShotPreviewed = False
        await self._sync_device()

    async def remove_photo(self, index: int) -> None:
        """Raises IndexError for an index that is not currently in the set.

        Removing the newest shot while it is previewed ends the preview and
        resumes the stream, as a retake would.
        """
        s = self.state
        if s.step != sm.STEP_CAPTURE:
            return
        was_newest = index == len(s.photos) - 1
        self.photo_set.remove_at(index)
        self._sync_photos()
        if s.lastShotPreviewed and was_newest:
            s.lastShotPreviewed = False
            await self._sync_device()

    async def submit(self) -> bool:
        s = self.state
        if s.step != sm.STEP_CAPTURE or s.submitting:
            return False
        try:
            check_preconditions(s.context, self.photo_set.photos, s.eligibility)
        except VerificationError as e:
            self._fail(e)
            return False

        self.device.release()
        s.submitting = True
        s.clear_error()
        try:
            result: SubmissionResult = await self.submitter(s.context, self.photo_set.photos, s.eligibility)
        except VerificationError as e:
            if self._drop_stale("submission"):
                return False
            self._fail(e)
            await self._sync_device()
            return False
        finally:
            s.submitting = False

        s.step = sm.STEP_DONE
        s.lastSubmissionWasResubmission = result.isResubmission
        s.submittedRecordId = result.recordId
        self.device.release()
        log(event="step_changed", workflowId=self.id, step=s.step, resubmission=result.isResubmission)
        return True

    # ------------------------------------------------------------------
    # misc
    # ------------------------------------------------------------------
    def toggle_locale(self) -> None:
        self.messages = self.messages.toggled()

    def close(self) -> None:
        self.closed = True
        self.device.release()
        log(event="workflow_closed", workflowId=self.id, step=self.state.step)
