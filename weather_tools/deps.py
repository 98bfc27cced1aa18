import secrets
from typing import Optional

import httpx
from fastapi import Header, HTTPException, Request, status

from .config import CONFIG


def get_api_key(x_api_key: Optional[str] = Header(default=None, alias="X-API-Key")) -> str:
    expected = CONFIG.api_key
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing tools API key",
        )
    return x_api_key


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The shared client opened by the app lifespan."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Provider HTTP client not initialized",
        )
    return client
