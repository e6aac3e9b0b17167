import asyncio
import threading
import numpy as np
import pytest
from cropverify.capture.device import (
    AcquireOutcome,
    AcquireResult,
    CameraBackend,
    CaptureDeviceController,
    FrameHandle,
    OpenCVCameraBackend,
)
from cropverify.core import state_machine as sm
from cropverify.core.errors import DeviceUnavailable


class FakeHandle(FrameHandle):
    def __init__(self):
        self.released = 0

    def read(self):
        return np.zeros((480, 640, 3), dtype=np.uint8)

    def release(self):
        self.released += 1


class FakeBackend(CameraBackend):
    def __init__(self, outcome=AcquireOutcome.GRANTED):
        self.outcome = outcome
        self.opens = 0
        self.handles = []

    def open(self):
        self.opens += 1
        if self.outcome != AcquireOutcome.GRANTED:
            return AcquireResult(self.outcome)
        h = FakeHandle()
        self.handles.append(h)
        return AcquireResult(AcquireOutcome.GRANTED, h)


class GatedBackend(FakeBackend):
    """open() blocks until the test lets it through."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.gate = threading.Event()

    def open(self):
        self.started.set()
        self.gate.wait(timeout=5)
        return super().open()


def test_acquire_then_read_and_release():
    backend = FakeBackend()
    dev = CaptureDeviceController(backend)
    asyncio.run(dev.acquire())

    assert dev.state == sm.DEVICE_STREAMING
    assert dev.is_streaming
    assert dev.read_frame().shape == (480, 640, 3)

    dev.release()
    assert dev.state == sm.DEVICE_RELEASED
    assert backend.handles[0].released == 1


def test_release_is_idempotent():
    backend = FakeBackend()
    dev = CaptureDeviceController(backend)
    dev.release()
    assert dev.state == sm.DEVICE_IDLE

    asyncio.run(dev.acquire())
    dev.release()
    dev.release()
    assert dev.state == sm.DEVICE_RELEASED
    assert backend.handles[0].released == 1


def test_acquire_while_streaming_is_noop():
    backend = FakeBackend()
    dev = CaptureDeviceController(backend)

    async def run():
        await dev.acquire()
        await dev.acquire()

    asyncio.run(run())
    assert backend.opens == 1


@pytest.mark.parametrize("outcome", [AcquireOutcome.DENIED, AcquireOutcome.UNAVAILABLE])
def test_denied_or_missing_camera_raises(outcome):
    dev = CaptureDeviceController(FakeBackend(outcome))
    with pytest.raises(DeviceUnavailable):
        asyncio.run(dev.acquire())
    assert dev.state == sm.DEVICE_IDLE
    assert not dev.is_streaming


def test_read_frame_without_stream_raises():
    dev = CaptureDeviceController(FakeBackend())
    with pytest.raises(DeviceUnavailable):
        dev.read_frame()


def test_release_during_acquire_discards_late_handle():
    backend = GatedBackend()
    dev = CaptureDeviceController(backend)

    async def run():
        task = asyncio.create_task(dev.acquire())
        while not backend.started.is_set():
            await asyncio.sleep(0.01)
        assert dev.state == sm.DEVICE_ACQUIRING
        # Concurrent acquire is a no-op while the first is in flight
        await dev.acquire()
        dev.release()
        backend.gate.set()
        await task

    asyncio.run(run())
    assert backend.opens == 1
    assert dev.state == sm.DEVICE_RELEASED
    assert not dev.is_streaming
    assert backend.handles[0].released == 1


def test_reacquire_after_release():
    backend = FakeBackend()
    dev = CaptureDeviceController(backend)

    async def run():
        await dev.acquire()
        dev.release()
        await dev.acquire()

    asyncio.run(run())
    assert dev.is_streaming
    assert backend.opens == 2


def test_disabled_opencv_backend_reports_denied():
    result = OpenCVCameraBackend(enabled=False).open()
    assert result.outcome == AcquireOutcome.DENIED
    assert result.handle is None
