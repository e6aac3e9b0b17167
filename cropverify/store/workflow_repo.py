"""
In-memory workflow registry. Workflows (and the photos they hold) live only as
long as the process; nothing is written to disk.

Clients never signal "navigated away", so a workflow left untouched for
WORKFLOW_INACTIVITY_TIMEOUT_SEC is closed on the next create()/get() sweep,
which releases its camera handle.
"""

import time
from typing import Callable, Dict, Optional

from cropverify.core.workflow import VerificationWorkflow
from cropverify.i18n import Messages
from cropverify.observability.logging import log
from cropverify.settings import settings

WorkflowFactory = Callable[..., VerificationWorkflow]


class WorkflowRepo:
    def __init__(
        self,
        factory: Optional[WorkflowFactory] = None,
        *,
        inactivity_timeout_sec: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.factory: WorkflowFactory = factory or VerificationWorkflow
        self.inactivity_timeout_sec = (
            settings.WORKFLOW_INACTIVITY_TIMEOUT_SEC if inactivity_timeout_sec is None else inactivity_timeout_sec
        )
        self.clock = clock
        self._items: Dict[str, VerificationWorkflow] = {}
        self._last_seen: Dict[str, float] = {}

    def sweep(self) -> int:
        """Close every workflow idle past the timeout. Returns how many were closed."""
        if not self.inactivity_timeout_sec or self.inactivity_timeout_sec <= 0:
            return 0
        now = self.clock()
        expired = [wid for wid, seen in self._last_seen.items() if now - seen > self.inactivity_timeout_sec]
        for wid in expired:
            idle = int(now - self._last_seen[wid])
            self.discard(wid)
            log(event="workflow_expired", workflowId=wid, idleSec=idle)
        return len(expired)

    def create(self, identifier: Optional[str], locale: Optional[str] = None) -> VerificationWorkflow:
        self.sweep()
        kwargs = {"messages": Messages(locale)} if locale else {}
        wf = self.factory(identifier, **kwargs)
        self._items[wf.id] = wf
        self._last_seen[wf.id] = self.clock()
        log(event="workflow_created", workflowId=wf.id, identifier=wf.identifier)
        return wf

    def get(self, workflow_id: str) -> Optional[VerificationWorkflow]:
        self.sweep()
        wf = self._items.get(workflow_id)
        if wf is not None:
            self._last_seen[workflow_id] = self.clock()
        return wf

    def discard(self, workflow_id: str) -> Optional[VerificationWorkflow]:
        self._last_seen.pop(workflow_id, None)
        wf = self._items.pop(workflow_id, None)
        if wf is not None:
            wf.close()
        return wf

    def close_all(self) -> int:
        ids = list(self._items.keys())
        for wid in ids:
            self.discard(wid)
        return len(ids)

    def __len__(self) -> int:
        return len(self._items)


repo = WorkflowRepo()


def get_repo() -> WorkflowRepo:
    return repo
