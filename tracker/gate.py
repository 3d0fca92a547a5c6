"""
Bearer-token gate for everything under the API prefix.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from tracker.auth import AuthenticationError, bearer_token, decode_token
from tracker.config import Settings

logger = logging.getLogger(__name__)


def is_gated(path: str, settings: Settings) -> bool:
    prefix = settings.api_prefix.rstrip("/")
    if path != prefix and not path.startswith(prefix + "/"):
        return False
    return path.rstrip("/") != f"{prefix}/login"


def is_authenticated(request: Request, settings: Settings) -> bool:
    token = bearer_token(request.headers.get("authorization"))
    try:
        decode_token(token, settings)
    except AuthenticationError as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
        return False
    return True


def auth_gate(settings: Settings):
    """
    Build an HTTP middleware that rejects unauthenticated API requests.

    Token claims only gate access; they are not attached to the request.
    """

    async def middleware(request: Request, call_next):
        if is_gated(request.url.path, settings) and not is_authenticated(
            request, settings
        ):
            return JSONResponse(status_code=401, content={"message": "Unauthorized"})
        return await call_next(request)

    return middleware
