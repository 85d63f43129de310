"""API key check for the push endpoints."""

from __future__ import annotations

import hmac

from fastapi import Depends, HTTPException, Request, status

from chainscope.settings import Settings, get_settings


def api_settings() -> Settings:
    """Dependency provider returning the active settings."""

    return get_settings()


def require_api_key(request: Request, settings: Settings = Depends(api_settings)) -> None:
    """Reject requests whose API key header does not match ``settings.api.key``.

    Raises:
        HTTPException: 401 when the header is missing, 403 when it is wrong.
    """

    provided = request.headers.get(settings.api.header_name)
    if not provided:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Missing {settings.api.header_name}")
    if not hmac.compare_digest(provided, settings.api.key):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid API key")
