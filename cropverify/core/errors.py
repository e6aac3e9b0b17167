"""
Workflow Error Taxonomy
-----------------------
Every remote or device failure is caught at its component boundary and turned
into one of these kinds, which the workflow stores as error state.

- fatal kinds (ConfigurationError, ContextUnavailable) replace the whole view
  with an error screen and a support call link;
- the rest render inline next to the step that raised them.
"""

from __future__ import annotations

from typing import Optional


class VerificationError(Exception):
    fatal: bool = False
    default_message: str = "Something went wrong"
    message_key: Optional[str] = None

    def __init__(self, message: Optional[str] = None, *, message_key: Optional[str] = None):
        # A message from the backend wins over the localized fallback
        self.remote_message = message
        if message_key:
            self.message_key = message_key
        self.message = message or self.default_message
        super().__init__(self.message)

    def localized(self, messages) -> str:
        if self.remote_message:
            return self.remote_message
        if self.message_key:
            return messages.t(self.message_key, self.default_message)
        return self.message

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigurationError(VerificationError):
    """A required identifier is missing."""
    fatal = True
    default_message = "Crop ID is required"
    message_key = "errors.cropIdRequired"


class ContextUnavailable(VerificationError):
    """Listing lookup failed or returned an unusable record."""
    fatal = True
    default_message = "Failed to load crop data"
    message_key = "errors.loadCropDataFailed"


class DeviceUnavailable(VerificationError):
    """Camera denied, absent, or not ready."""
    default_message = "Camera access denied"
    message_key = "errors.cameraDenied"


class NoFrameAvailable(DeviceUnavailable):
    """The device is streaming but has not produced a usable frame yet."""


class NoPhotoCaptured(VerificationError):
    default_message = "Please capture at least one photo"
    message_key = "errors.noPhotoCaptured"


class SubmissionBlocked(VerificationError):
    """Eligibility forbids a new submission (e.g. one is already under review)."""
    default_message = "Cannot submit new verification request"
    message_key = "errors.cannotSubmit"


class SubmissionFailed(VerificationError):
    default_message = "Submission failed"
    message_key = "errors.submissionFailed"


class LocationUnavailable(Exception):
    """Geolocation denied or absent. Never surfaced as a workflow failure."""
