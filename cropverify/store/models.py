from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def as_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class ListingContext:
    # Core identifiers
    identifier: str = ""
    ownerId: str = ""

    # Owner / farm (display fields, also sent with the submission)
    fullName: str = ""
    phone: str = ""  # national number, "+91" stripped
    village: str = ""
    taluk: str = ""
    district: str = ""

    # Crop
    cropName: str = ""
    quantity: str = ""  # display string, e.g. "50 bags"
    variety: str = ""
    # Only meaningful for maize
    moisture: str = ""
    willDry: str = ""  # "Yes" / "No" / ""

    # Farm coordinate from the listing; a step-2 reading replaces it
    location: Optional[GeoPoint] = None

    @property
    def isMaize(self) -> bool:
        return str(self.cropName or "").strip().lower() == "maize"


class VerificationStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Statuses under which the backend will not take a new submission
BLOCKING_STATUSES = (VerificationStatus.PENDING, VerificationStatus.APPROVED)


@dataclass(frozen=True)
class EligibilityState:
    hasExistingRecord: bool = False
    canSubmit: bool = True
    status: VerificationStatus = VerificationStatus.NONE
    blockMessage: Optional[str] = None
    existingRecordId: Optional[str] = None

    def __post_init__(self):
        # INVARIANT: canSubmit is a function of status
        expected = self.status not in BLOCKING_STATUSES
        if self.canSubmit != expected:
            raise ValueError(f"canSubmit={self.canSubmit} contradicts status={self.status.value}")


@dataclass(frozen=True)
class CapturedPhoto:
    index: int
    data: bytes  # encoded JPEG
    capturedAtMs: int = 0

    @property
    def content_type(self) -> str:
        return "image/jpeg"


@dataclass
class WorkflowState:
    # Wizard position: 1=review, 2=capture, 3=done
    step: int = 1

    # Capture-local flags (reset on "go back")
    cameraGranted: bool = False
    lastShotPreviewed: bool = False

    # Loading flags
    loading: bool = False
    checkingStatus: bool = True
    submitting: bool = False

    # Inline, recoverable error (message + error kind name)
    error: Optional[str] = None
    errorKind: Optional[str] = None
    # Fatal error replaces the whole view (ConfigurationError / ContextUnavailable)
    fatalError: Optional[str] = None
    fatalKind: Optional[str] = None

    context: Optional[ListingContext] = None
    eligibility: Optional[EligibilityState] = None
    photos: Tuple[CapturedPhoto, ...] = field(default_factory=tuple)

    # Observability only
    lastSubmissionWasResubmission: bool = False
    submittedRecordId: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None
        self.errorKind = None
