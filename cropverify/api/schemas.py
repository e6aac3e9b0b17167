from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

StepState = Literal["done", "current", "todo"]

class CreateWorkflowRequest(BaseModel):
    identifier: str = ""
    locale: Optional[str] = None

class LocationReading(BaseModel):
    # Client-side geolocation fix, if the user's browser produced one
    lat: float
    lng: float

class StepView(BaseModel):
    number: int
    label: str
    state: StepState

class ButtonView(BaseModel):
    label: str
    enabled: bool = True

class FatalView(BaseModel):
    title: str
    message: str
    supportPhone: str
    supportLink: str
    supportLabel: str

class ListingCardView(BaseModel):
    cropName: str
    quantity: str
    variety: str
    isMaize: bool
    # Only rendered for maize
    moisture: Optional[str] = None
    willDry: Optional[str] = None
    fullName: str
    phone: str
    village: str
    taluk: str
    district: str

class StatusBanner(BaseModel):
    kind: Literal["blocked", "resubmission"]
    title: str
    message: Optional[str] = None

class PhotoThumb(BaseModel):
    index: int
    number: int
    url: str

class WorkflowView(BaseModel):
    workflowId: str
    locale: str
    step: int
    heading: str = ""
    steps: List[StepView] = Field(default_factory=list)
    loading: bool = False
    done: bool = False
    fatal: Optional[FatalView] = None
    listing: Optional[ListingCardView] = None
    banner: Optional[StatusBanner] = None
    error: Optional[str] = None
    errorKind: Optional[str] = None
    cameraGranted: bool = False
    streaming: bool = False
    previewing: bool = False
    previewUrl: Optional[str] = None
    photos: List[PhotoThumb] = Field(default_factory=list)
    photoCountLabel: Optional[str] = None
    maxPhotos: int = 3
    actions: Dict[str, ButtonView] = Field(default_factory=dict)
    supportLink: str = ""
