"""
Renders a workflow into the wizard view model. The workflow's Messages value
(locale) is threaded through here; nothing reads a global language.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from cropverify.api.schemas import (
    ButtonView,
    FatalView,
    ListingCardView,
    PhotoThumb,
    StatusBanner,
    StepView,
    WorkflowView,
)
from cropverify.core import state_machine as sm
from cropverify.core.workflow import VerificationWorkflow
from cropverify.i18n import Messages
from cropverify.settings import settings
from cropverify.store.models import ListingContext, VerificationStatus, WorkflowState


def _or_dash(v: str) -> str:
    return v or "-"


def support_link() -> str:
    return f"tel:{settings.SUPPORT_PHONE}"


def render_listing(ctx: ListingContext, t: Messages) -> ListingCardView:
    return ListingCardView(
        cropName=ctx.cropName or t.t("cropCard.cropNamePlaceholder"),
        quantity=_or_dash(ctx.quantity),
        variety=_or_dash(ctx.variety),
        isMaize=ctx.isMaize,
        moisture=(f"{ctx.moisture}%" if ctx.moisture else "-") if ctx.isMaize else None,
        willDry=_or_dash(ctx.willDry) if ctx.isMaize else None,
        fullName=_or_dash(ctx.fullName),
        phone=f"+91 {ctx.phone}" if ctx.phone else "-",
        village=_or_dash(ctx.village),
        taluk=_or_dash(ctx.taluk),
        district=_or_dash(ctx.district),
    )


def render_banner(state: WorkflowState, t: Messages) -> Optional[StatusBanner]:
    e = state.eligibility
    if e is None:
        return None
    if not e.canSubmit:
        key = "status.pendingTitle" if e.status == VerificationStatus.PENDING else "status.approvedTitle"
        return StatusBanner(kind="blocked", title=t.t(key), message=e.blockMessage)
    if e.status == VerificationStatus.REJECTED:
        return StatusBanner(kind="resubmission", title=t.t("status.resubmitTitle"), message=t.t("status.resubmitText"))
    return None


def render_steps(step: int, t: Messages) -> List[StepView]:
    out = []
    for number, label in sm.STEP_LABELS.items():
        state = "done" if step > number else ("current" if step == number else "todo")
        out.append(StepView(number=number, label=t.t(f"steps.{label}"), state=state))
    return out


def render_actions(wf: VerificationWorkflow, t: Messages) -> Dict[str, ButtonView]:
    s = wf.state
    actions: Dict[str, ButtonView] = {}

    if s.step == sm.STEP_REVIEW:
        blocked = s.eligibility is not None and not s.eligibility.canSubmit
        if s.loading or s.checkingStatus:
            label = t.t("buttons.loading")
        elif blocked:
            label = t.t("buttons.cannotStart")
        else:
            label = t.t("buttons.startVerification")
        actions["start"] = ButtonView(label=label, enabled=wf.can_start)

    elif s.step == sm.STEP_CAPTURE:
        actions["back"] = ButtonView(label=t.t("Back"), enabled=not s.submitting)
        count = len(s.photos)
        if not s.cameraGranted:
            actions["grantAccess"] = ButtonView(label=t.t("buttons.allowCameraAccess"))
        elif not s.lastShotPreviewed:
            actions["capture"] = ButtonView(
                label=t.t("buttons.capturePhoto"),
                enabled=wf.device.is_streaming and not wf.photo_set.is_full,
            )
        else:
            actions["retake"] = ButtonView(label=t.t("cameraVerification.retake"), enabled=not s.submitting)
            if not wf.photo_set.is_full:
                actions["captureAnother"] = ButtonView(label=t.t("buttons.captureAnother"), enabled=not s.submitting)
            if count > 0:
                actions["submit"] = ButtonView(
                    label=t.t("buttons.submitting") if s.submitting else t.t("buttons.submit"),
                    enabled=not s.submitting,
                )

    return actions


def render_view(wf: VerificationWorkflow, base_url: str = "") -> WorkflowView:
    s = wf.state
    t = wf.messages
    photo_url = f"{base_url}/workflows/{wf.id}/photos"

    view = WorkflowView(
        workflowId=wf.id,
        locale=t.locale,
        step=s.step,
        heading=t.t("step3.title") if s.step == sm.STEP_DONE else t.t("header.subtitle"),
        steps=render_steps(s.step, t),
        loading=s.loading or s.checkingStatus,
        done=s.step == sm.STEP_DONE,
        maxPhotos=wf.photo_set.max_photos,
        supportLink=support_link(),
    )

    if s.fatalError:
        view.loading = False
        view.fatal = FatalView(
            title=t.t("errors.cropNotFoundTitle"),
            message=s.fatalError,
            supportPhone=settings.SUPPORT_PHONE,
            supportLink=support_link(),
            supportLabel=t.t("incorrectDetails.callUs"),
        )
        return view

    if s.context is not None:
        view.listing = render_listing(s.context, t)
    view.banner = render_banner(s, t)
    view.error = s.error
    view.errorKind = s.errorKind
    view.cameraGranted = s.cameraGranted
    view.streaming = wf.device.is_streaming
    view.previewing = s.lastShotPreviewed
    view.photos = [PhotoThumb(index=p.index, number=p.index + 1, url=f"{photo_url}/{p.index}") for p in s.photos]
    if s.photos:
        view.photoCountLabel = t.t("cameraVerification.capturedPhotos", count=len(s.photos))
        if s.lastShotPreviewed:
            view.previewUrl = f"{photo_url}/{s.photos[-1].index}"
    view.actions = render_actions(wf, t)
    return view
