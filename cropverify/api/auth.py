from fastapi import Header, HTTPException
from cropverify.settings import settings


def require_api_key(x_api_key: str = Header(default="", alias="x-api-key")):
    """
    Guards the /workflows wizard routes and /admin/metrics.

    Kiosk and field-app deployments usually leave API_KEY unset, in which case
    every caller may drive a verification workflow. When API_KEY is set, the
    x-api-key header must carry it or the request is rejected with 401 before
    any workflow is looked up or camera is touched.
    """
    expected = settings.API_KEY
    if not expected:
        return
    if x_api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid API key")
