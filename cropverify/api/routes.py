from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response

from cropverify.api.auth import require_api_key
from cropverify.api.schemas import CreateWorkflowRequest, LocationReading, WorkflowView
from cropverify.api.view import render_view
from cropverify.core.workflow import VerificationWorkflow
from cropverify.store.models import GeoPoint
from cropverify.store.workflow_repo import WorkflowRepo, get_repo

router = APIRouter(prefix="/workflows", dependencies=[Depends(require_api_key)])


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _load(workflow_id: str, repo: WorkflowRepo) -> VerificationWorkflow:
    wf = repo.get(workflow_id)
    if wf is None:
        raise HTTPException(status_code=404, detail="Unknown workflow")
    return wf


def _view(request: Request, wf: VerificationWorkflow) -> WorkflowView:
    return render_view(wf, base_url=_base_url(request))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------
@router.post("", response_model=WorkflowView)
async def create_workflow(request: Request, body: CreateWorkflowRequest, repo: WorkflowRepo = Depends(get_repo)):
    """Open a wizard for a listing identifier and run step-1 loading (listing, then eligibility)."""
    wf = repo.create(body.identifier, locale=body.locale)
    await wf.load()
    return _view(request, wf)


@router.get("/{workflow_id}", response_model=WorkflowView)
async def get_workflow(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    return _view(request, _load(workflow_id, repo))


@router.delete("/{workflow_id}")
async def close_workflow(workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = repo.discard(workflow_id)
    if wf is None:
        raise HTTPException(status_code=404, detail="Unknown workflow")
    return {"workflowId": workflow_id, "closed": True}


@router.post("/{workflow_id}/locale", response_model=WorkflowView)
async def toggle_locale(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    wf.toggle_locale()
    return _view(request, wf)


# ---------------------------------------------------------------------------
# Step transitions
# ---------------------------------------------------------------------------
@router.post("/{workflow_id}/start", response_model=WorkflowView)
async def start_verification(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    wf.start_verification()
    return _view(request, wf)


@router.post("/{workflow_id}/back", response_model=WorkflowView)
async def go_back(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    wf.go_back()
    return _view(request, wf)


@router.post("/{workflow_id}/camera", response_model=WorkflowView)
async def grant_access(
    request: Request,
    workflow_id: str,
    reading: Optional[LocationReading] = Body(None),
    repo: WorkflowRepo = Depends(get_repo),
):
    wf = _load(workflow_id, repo)
    point = GeoPoint(lat=reading.lat, lng=reading.lng) if reading else None
    await wf.grant_access(point)
    return _view(request, wf)


@router.post("/{workflow_id}/capture", response_model=WorkflowView)
async def capture(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    wf.capture()
    return _view(request, wf)


@router.post("/{workflow_id}/retake", response_model=WorkflowView)
async def retake(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    await wf.retake()
    return _view(request, wf)


@router.post("/{workflow_id}/another", response_model=WorkflowView)
async def capture_another(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    await wf.capture_another()
    return _view(request, wf)


@router.post("/{workflow_id}/submit", response_model=WorkflowView)
async def submit(request: Request, workflow_id: str, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    await wf.submit()
    return _view(request, wf)


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------
@router.get("/{workflow_id}/photos/{index}")
async def view_photo(workflow_id: str, index: int, repo: WorkflowRepo = Depends(get_repo)):
    """Full-size still, as burned in at capture time."""
    wf = _load(workflow_id, repo)
    photos = wf.state.photos
    if not 0 <= index < len(photos):
        raise HTTPException(status_code=404, detail="Unknown photo")
    photo = photos[index]
    return Response(content=photo.data, media_type=photo.content_type)


@router.delete("/{workflow_id}/photos/{index}", response_model=WorkflowView)
async def remove_photo(request: Request, workflow_id: str, index: int, repo: WorkflowRepo = Depends(get_repo)):
    wf = _load(workflow_id, repo)
    try:
        await wf.remove_photo(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Unknown photo")
    return _view(request, wf)
