"""FastAPI dependency injection helpers."""

import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request

from ridehail.services.rides import RideService


def get_ride_service(request: Request) -> RideService:
    """Return the process-wide ride service created by the app factory."""
    return request.app.state.ride_service


def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(default=None),
) -> None:
    expected = request.app.state.settings.admin_token
    if x_admin_token is None or not secrets.compare_digest(
        x_admin_token.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Admin token required")
