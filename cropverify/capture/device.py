"""
Capture Device Controller
-------------------------
Owns the single live camera handle.

States: idle -> acquiring -> streaming -> released

- acquire() is a no-op while acquiring or streaming (one acquisition at a time).
- release() is unconditional and idempotent. A release that lands while an
  acquisition is still in flight wins: the late handle is closed on arrival.
- the permission prompt of a browser becomes an explicit AcquireOutcome
  (granted / denied / unavailable); anything but granted raises DeviceUnavailable.

Opening the device blocks (OpenCV probes backends and waits for the sensor),
so it runs in the threadpool; state is only touched on the event loop.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import cv2
import numpy as np
from starlette.concurrency import run_in_threadpool

from cropverify.core import state_machine as sm
from cropverify.core.errors import DeviceUnavailable
from cropverify.observability.logging import log
from cropverify.settings import settings


class AcquireOutcome(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNAVAILABLE = "unavailable"


class FrameHandle:
    """An open device. read() returns a BGR frame or None when nothing is ready."""

    def read(self) -> Optional[np.ndarray]:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


@dataclass
class AcquireResult:
    outcome: AcquireOutcome
    handle: Optional[FrameHandle] = None


class CameraBackend:
    def open(self) -> AcquireResult:
        """Blocking. Must not raise for denial/absence; report it in the outcome."""
        raise NotImplementedError


class OpenCVHandle(FrameHandle):
    def __init__(self, cam: cv2.VideoCapture):
        self.cam = cam

    def read(self) -> Optional[np.ndarray]:
        ok, frame = self.cam.read()
        if not ok:
            return None
        return frame

    def release(self) -> None:
        self.cam.release()


def open_camera_with_retry(camera_index: int, timeout_seconds: float) -> Optional[cv2.VideoCapture]:
    cam: Optional[cv2.VideoCapture] = None
    deadline = time.time() + max(timeout_seconds, 0.5)
    if sys.platform == "darwin":
        backends = [cv2.CAP_AVFOUNDATION, None]
    else:
        backends = [None]

    while time.time() < deadline:
        if cam is not None:
            cam.release()
        for backend in backends:
            if backend is None:
                cam = cv2.VideoCapture(camera_index)
            else:
                cam = cv2.VideoCapture(camera_index, backend)
            if cam.isOpened():
                return cam
            cam.release()
        time.sleep(0.35)
    if cam is not None:
        cam.release()
    return None


def open_camera_source_with_retry(source: str, timeout_seconds: float) -> Optional[cv2.VideoCapture]:
    cam: Optional[cv2.VideoCapture] = None
    deadline = time.time() + max(timeout_seconds, 0.5)
    while time.time() < deadline:
        if cam is not None:
            cam.release()
        cam = cv2.VideoCapture(source)
        if cam.isOpened():
            return cam
        time.sleep(0.35)
    if cam is not None:
        cam.release()
    return None


class OpenCVCameraBackend(CameraBackend):
    """
    Rear/field camera via OpenCV. CAMERA_INDEX selects the device facing the
    crop; CAMERA_SOURCE (stream URL or device path) overrides it.
    """

    def __init__(
        self,
        *,
        enabled: Optional[bool] = None,
        camera_index: Optional[int] = None,
        source: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.enabled = settings.CAMERA_ENABLED if enabled is None else enabled
        self.camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self.source = settings.CAMERA_SOURCE if source is None else source
        self.width = width or settings.CAMERA_WIDTH
        self.height = height or settings.CAMERA_HEIGHT
        self.timeout_seconds = settings.CAMERA_OPEN_TIMEOUT_SEC if timeout_seconds is None else timeout_seconds

    def open(self) -> AcquireResult:
        if not self.enabled:
            return AcquireResult(AcquireOutcome.DENIED)
        try:
            if self.source:
                cam = open_camera_source_with_retry(self.source, self.timeout_seconds)
            else:
                cam = open_camera_with_retry(self.camera_index, self.timeout_seconds)
        except cv2.error as e:
            log(event="device_open_error", error=str(e)[:300])
            return AcquireResult(AcquireOutcome.UNAVAILABLE)
        if cam is None:
            return AcquireResult(AcquireOutcome.UNAVAILABLE)
        # Preferred, not exact: drivers fall back to their nearest mode
        cam.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cam.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        return AcquireResult(AcquireOutcome.GRANTED, OpenCVHandle(cam))


class CaptureDeviceController:
    def __init__(self, backend: Optional[CameraBackend] = None):
        self.backend = backend or OpenCVCameraBackend()
        self.state = sm.DEVICE_IDLE
        self._handle: Optional[FrameHandle] = None
        # Bumped by every release(); an acquisition that started under an older
        # generation drops its handle when it completes.
        self._generation = 0

    @property
    def is_streaming(self) -> bool:
        return self.state == sm.DEVICE_STREAMING

    async def acquire(self) -> None:
        if self.state in (sm.DEVICE_ACQUIRING, sm.DEVICE_STREAMING):
            log(event="device_acquire_noop", state=self.state)
            return

        generation = self._generation
        self.state = sm.DEVICE_ACQUIRING
        log(event="device_acquire_start")
        result = await run_in_threadpool(self.backend.open)

        if generation != self._generation:
            if result.handle is not None:
                result.handle.release()
            log(event="device_acquire_discarded", outcome=result.outcome.value)
            return

        if result.outcome != AcquireOutcome.GRANTED or result.handle is None:
            self.state = sm.DEVICE_IDLE
            log(event="device_acquire_failed", outcome=result.outcome.value)
            raise DeviceUnavailable()

        self._handle = result.handle
        self.state = sm.DEVICE_STREAMING
        log(event="device_acquire_granted")

    def read_frame(self) -> Optional[np.ndarray]:
        if self.state != sm.DEVICE_STREAMING or self._handle is None:
            raise DeviceUnavailable()
        return self._handle.read()

    def release(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.release()
            self._handle = None
        if self.state in (sm.DEVICE_ACQUIRING, sm.DEVICE_STREAMING):
            self.state = sm.DEVICE_RELEASED
            log(event="device_released")
