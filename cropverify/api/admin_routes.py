from fastapi import APIRouter, Depends

from cropverify.api.auth import require_api_key
import cropverify.observability.metrics as metrics
from cropverify.store.workflow_repo import WorkflowRepo, get_repo

router = APIRouter(prefix="/admin", dependencies=[Depends(require_api_key)])


@router.get("/metrics")
def admin_metrics(repo: WorkflowRepo = Depends(get_repo)):
    """Submission counters plus the number of open workflows."""
    snap = metrics.snapshot()
    snap["openWorkflows"] = len(repo)
    return snap
