"""
User-facing strings for the wizard.

Locale is a value carried by each workflow and passed into rendering; there is
no process-wide "current language". Unknown keys fall back to English, then to
the caller-supplied default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

EN: Dict[str, str] = {
    "header.subtitle": "Crop verification",
    "Back": "Back",
    "cropCard.cropNamePlaceholder": "Crop",
    "steps.details": "Details",
    "steps.verify": "Verify",
    "steps.profile": "Done",
    "buttons.loading": "Loading...",
    "buttons.startVerification": "Start Verification",
    "buttons.cannotStart": "Cannot Start Verification",
    "buttons.allowCameraAccess": "Allow Camera Access",
    "buttons.capturePhoto": "Capture Photo",
    "buttons.captureAnother": "Capture Another",
    "buttons.submit": "Submit",
    "buttons.submitting": "Submitting...",
    "cameraVerification.retake": "Retake",
    "cameraVerification.capturedPhotos": "Captured photos ({count})",
    "status.pendingTitle": "Verification Under Review",
    "status.approvedTitle": "Already Verified",
    "status.resubmitTitle": "Ready for Resubmission",
    "status.resubmitText": "Your previous request was reviewed. You can now submit a new verification request.",
    "errors.cropNotFoundTitle": "Crop Not Found",
    "errors.cropIdRequired": "Crop ID is required",
    "errors.cropIdMissing": "Crop ID is missing",
    "errors.loadCropDataFailed": "Failed to load crop data",
    "errors.cameraDenied": "Camera access denied. Please allow camera access and try again.",
    "errors.locationAccess": "Unable to access location",
    "errors.noPhotoCaptured": "Please capture at least one photo",
    "errors.submissionFailed": "Submission failed. Please try again.",
    "errors.submitError": "Something went wrong while submitting. Please try again.",
    "errors.cannotSubmit": "Cannot submit new verification request",
    "errors.submissionBlocked": "Cannot submit verification request",
    "incorrectDetails.callUs": "Call Support",
    "step3.title": "Verification submitted",
}

KN: Dict[str, str] = {
    "header.subtitle": "ಬೆಳೆ ಪರಿಶೀಲನೆ",
    "Back": "ಹಿಂದೆ",
    "cropCard.cropNamePlaceholder": "ಬೆಳೆ",
    "steps.details": "ವಿವರಗಳು",
    "steps.verify": "ಪರಿಶೀಲಿಸಿ",
    "steps.profile": "ಮುಗಿದಿದೆ",
    "buttons.loading": "ಲೋಡ್ ಆಗುತ್ತಿದೆ...",
    "buttons.startVerification": "ಪರಿಶೀಲನೆ ಪ್ರಾರಂಭಿಸಿ",
    "buttons.cannotStart": "ಪರಿಶೀಲನೆ ಪ್ರಾರಂಭಿಸಲು ಸಾಧ್ಯವಿಲ್ಲ",
    "buttons.allowCameraAccess": "ಕ್ಯಾಮೆರಾ ಪ್ರವೇಶ ಅನುಮತಿಸಿ",
    "buttons.capturePhoto": "ಫೋಟೋ ತೆಗೆಯಿರಿ",
    "buttons.captureAnother": "ಇನ್ನೊಂದು ಫೋಟೋ ತೆಗೆಯಿರಿ",
    "buttons.submit": "ಸಲ್ಲಿಸಿ",
    "buttons.submitting": "ಸಲ್ಲಿಸಲಾಗುತ್ತಿದೆ...",
    "cameraVerification.retake": "ಮತ್ತೆ ತೆಗೆಯಿರಿ",
    "cameraVerification.capturedPhotos": "ತೆಗೆದ ಫೋಟೋಗಳು ({count})",
    "status.pendingTitle": "ಪರಿಶೀಲನೆ ಪರಿಗಣನೆಯಲ್ಲಿದೆ",
    "status.approvedTitle": "ಈಗಾಗಲೇ ಪರಿಶೀಲಿಸಲಾಗಿದೆ",
    "status.resubmitTitle": "ಮರುಸಲ್ಲಿಕೆಗೆ ಸಿದ್ಧ",
    "status.resubmitText": "ನಿಮ್ಮ ಹಿಂದಿನ ವಿನಂತಿಯನ್ನು ಪರಿಶೀಲಿಸಲಾಗಿದೆ. ಈಗ ನೀವು ಹೊಸ ಪರಿಶೀಲನಾ ವಿನಂತಿಯನ್ನು ಸಲ್ಲಿಸಬಹುದು.",
    "errors.cropNotFoundTitle": "ಬೆಳೆ ಕಂಡುಬಂದಿಲ್ಲ",
    "errors.cropIdRequired": "ಬೆಳೆ ಐಡಿ ಅಗತ್ಯವಿದೆ",
    "errors.cropIdMissing": "ಬೆಳೆ ಐಡಿ ಕಾಣೆಯಾಗಿದೆ",
    "errors.loadCropDataFailed": "ಬೆಳೆ ಮಾಹಿತಿಯನ್ನು ಲೋಡ್ ಮಾಡಲು ವಿಫಲವಾಗಿದೆ",
    "errors.cameraDenied": "ಕ್ಯಾಮೆರಾ ಪ್ರವೇಶ ನಿರಾಕರಿಸಲಾಗಿದೆ. ದಯವಿಟ್ಟು ಕ್ಯಾಮೆರಾ ಪ್ರವೇಶ ಅನುಮತಿಸಿ ಮತ್ತೆ ಪ್ರಯತ್ನಿಸಿ.",
    "errors.locationAccess": "ಸ್ಥಳವನ್ನು ಪಡೆಯಲು ಸಾಧ್ಯವಾಗಲಿಲ್ಲ",
    "errors.noPhotoCaptured": "ದಯವಿಟ್ಟು ಕನಿಷ್ಠ ಒಂದು ಫೋಟೋ ತೆಗೆಯಿರಿ",
    "errors.submissionFailed": "ಸಲ್ಲಿಕೆ ವಿಫಲವಾಗಿದೆ. ದಯವಿಟ್ಟು ಮತ್ತೆ ಪ್ರಯತ್ನಿಸಿ.",
    "errors.submitError": "ಸಲ್ಲಿಸುವಾಗ ಏನೋ ತಪ್ಪಾಗಿದೆ. ದಯವಿಟ್ಟು ಮತ್ತೆ ಪ್ರಯತ್ನಿಸಿ.",
    "errors.cannotSubmit": "ಹೊಸ ಪರಿಶೀಲನಾ ವಿನಂತಿಯನ್ನು ಸಲ್ಲಿಸಲು ಸಾಧ್ಯವಿಲ್ಲ",
    "errors.submissionBlocked": "ಪರಿಶೀಲನಾ ವಿನಂತಿಯನ್ನು ಸಲ್ಲಿಸಲು ಸಾಧ್ಯವಿಲ್ಲ",
    "incorrectDetails.callUs": "ಸಹಾಯಕ್ಕೆ ಕರೆ ಮಾಡಿ",
    "step3.title": "ಪರಿಶೀಲನೆ ಸಲ್ಲಿಸಲಾಗಿದೆ",
}

CATALOGS: Dict[str, Dict[str, str]] = {"en": EN, "kn": KN}


@dataclass(frozen=True)
class Messages:
    locale: str = "en"

    def t(self, key: str, default: Optional[str] = None, **params) -> str:
        text = CATALOGS.get(self.locale, {}).get(key) or EN.get(key) or default or key
        for name, value in params.items():
            text = text.replace("{" + name + "}", str(value))
        return text

    def toggled(self) -> "Messages":
        return Messages("kn" if self.locale == "en" else "en")
