import asyncio
import numpy as np
from cropverify.capture.device import AcquireOutcome, AcquireResult, CameraBackend, CaptureDeviceController, FrameHandle
from cropverify.core import state_machine as sm
from cropverify.core.workflow import VerificationWorkflow
from cropverify.store.workflow_repo import WorkflowRepo


class FakeHandle(FrameHandle):
    def __init__(self):
        self.released = 0

    def read(self):
        return np.zeros((48, 64, 3), dtype=np.uint8)

    def release(self):
        self.released += 1


class FakeBackend(CameraBackend):
    def __init__(self):
        self.handles = []

    def open(self):
        h = FakeHandle()
        self.handles.append(h)
        return AcquireResult(AcquireOutcome.GRANTED, h)


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _repo(timeout=60):
    clock = Clock()
    backends = []

    def factory(identifier, **kwargs):
        backend = FakeBackend()
        backends.append(backend)
        return VerificationWorkflow(identifier, device=CaptureDeviceController(backend), **kwargs)

    return WorkflowRepo(factory, inactivity_timeout_sec=timeout, clock=clock), clock, backends


def test_idle_workflow_is_closed_and_camera_released():
    repo, clock, backends = _repo(timeout=60)
    wf = repo.create("crop-1")
    asyncio.run(wf.device.acquire())
    assert wf.device.is_streaming

    clock.now += 61
    assert repo.get(wf.id) is None
    assert len(repo) == 0
    assert wf.closed is True
    assert wf.device.state == sm.DEVICE_RELEASED
    assert backends[0].handles[0].released == 1


def test_access_keeps_workflow_alive():
    repo, clock, _ = _repo(timeout=60)
    wf = repo.create("crop-1")
    for _ in range(3):
        clock.now += 45
        assert repo.get(wf.id) is wf
    assert len(repo) == 1


def test_create_sweeps_abandoned_workflows():
    repo, clock, _ = _repo(timeout=60)
    old = repo.create("crop-1")
    clock.now += 120
    new = repo.create("crop-2")
    assert old.closed is True
    assert repo.get(old.id) is None
    assert repo.get(new.id) is new


def test_zero_timeout_disables_expiry():
    repo, clock, _ = _repo(timeout=0)
    wf = repo.create("crop-1")
    clock.now += 10 ** 6
    assert repo.sweep() == 0
    assert repo.get(wf.id) is wf


def test_discard_and_close_all():
    repo, _, _ = _repo()
    a = repo.create("crop-1")
    repo.create("crop-2")
    assert repo.discard(a.id) is a
    assert repo.discard(a.id) is None
    assert repo.close_all() == 1
    assert len(repo) == 0
