"""Shared FastAPI dependencies used across route modules."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Query, Request, status

from ..app import BotApp
from ..config import ApiKey


def get_app(request: Request) -> BotApp:
    return request.app.state.rpg


def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    api_key: str | None = Query(default=None, alias="apiKey"),
) -> ApiKey:
    """Resolve the caller's key from the header, or the ``apiKey`` query fallback."""
    key = x_api_key or api_key
    if not key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key required")
    entry = get_app(request).config.api.keys.get(key)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return entry


def require_premium_key(key: ApiKey = Depends(require_api_key)) -> ApiKey:
    if not key.premium:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Premium only")
    return key
