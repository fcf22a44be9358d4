from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status

from .config import Settings, get_settings

logger = logging.getLogger("security")

SERVICE_TOKEN_HEADER = "X-Service-Token"
USER_HEADER = "X-User-Id"


def verify_service_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.service_token
    if not expected:
        state = request.app.state
        if not getattr(state, "service_token_warning", False):
            logger.warning("No service token configured; accepting unauthenticated requests")
            state.service_token_warning = True
        return

    provided = request.headers.get(SERVICE_TOKEN_HEADER, "")
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid service token")


def optional_user_id(request: Request) -> str | None:
    value = request.headers.get(USER_HEADER, "").strip()
    return value or None


def require_user_id(request: Request) -> str:
    user_id = optional_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"missing {USER_HEADER} header")
    return user_id
