import os
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str):
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Remote services (each falls back to the deployment default)
    CROP_API_URL: str = os.getenv("CROP_API_URL", "https://markhet-internal-ngfs.onrender.com").rstrip("/")
    VERIFICATION_API_URL: str = os.getenv(
        "VERIFICATION_API_URL", "http://localhost:5000/api/verifications/submit"
    )
    VERIFICATION_STATUS_URL: str = os.getenv(
        "VERIFICATION_STATUS_URL", "http://localhost:5000/api/verifications/user"
    ).rstrip("/")
    SUPPORT_PHONE: str = os.getenv("SUPPORT_PHONE", "6206415125")

    # "crop_id": identifier is the crop record id
    # "user_crop": identifier is "<userId>/<cropName>"
    LOOKUP_STRATEGY: str = os.getenv("LOOKUP_STRATEGY", "crop_id").lower()

    HTTP_TIMEOUT_SEC: float = float(os.getenv("HTTP_TIMEOUT_SEC", "10"))
    SUBMIT_TIMEOUT_SEC: float = float(os.getenv("SUBMIT_TIMEOUT_SEC", "30"))

    # Workflows untouched for this long are closed (camera released, photos dropped)
    WORKFLOW_INACTIVITY_TIMEOUT_SEC: int = int(os.getenv("WORKFLOW_INACTIVITY_TIMEOUT_SEC", "900"))

    # Photo set
    MAX_PHOTOS: int = int(os.getenv("MAX_PHOTOS", "3"))

    # Capture device
    CAMERA_ENABLED: bool = os.getenv("CAMERA_ENABLED", "true").lower() == "true"
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    # Optional stream URL / device path; overrides CAMERA_INDEX when set
    CAMERA_SOURCE: str = os.getenv("CAMERA_SOURCE", "")
    CAMERA_WIDTH: int = int(os.getenv("CAMERA_WIDTH", "640"))
    CAMERA_HEIGHT: int = int(os.getenv("CAMERA_HEIGHT", "480"))
    CAMERA_OPEN_TIMEOUT_SEC: float = float(os.getenv("CAMERA_OPEN_TIMEOUT_SEC", "3.0"))

    # Evidence encoding + size reduction budget
    JPEG_QUALITY: int = int(os.getenv("JPEG_QUALITY", "92"))
    COMPRESS_MAX_SIZE_MB: float = float(os.getenv("COMPRESS_MAX_SIZE_MB", "0.5"))
    COMPRESS_MAX_DIMENSION: int = int(os.getenv("COMPRESS_MAX_DIMENSION", "1024"))

    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "en")

    # Fixed device position for kiosks without a GPS fix; unset = none
    DEVICE_LAT = _optional_float("DEVICE_LAT")
    DEVICE_LNG = _optional_float("DEVICE_LNG")

    # Security & Privacy
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

settings = Settings()
