from typing import Any, Optional, Tuple

import httpx

from cropverify.settings import settings


def _decode_json(resp: httpx.Response) -> Optional[Any]:
    try:
        return resp.json()
    except ValueError:
        return None


async def get_json(url: str, *, client: Optional[httpx.AsyncClient] = None) -> Tuple[int, Optional[Any]]:
    """GET url and return (status_code, decoded body or None). Transport errors propagate as httpx.HTTPError."""
    if client is not None:
        resp = await client.get(url)
        return resp.status_code, _decode_json(resp)
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC) as own:
        resp = await own.get(url)
        return resp.status_code, _decode_json(resp)


def body_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        msg = body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return None
