"""Request dependencies shared by the routers."""

from pathlib import Path

from fastapi import Header, HTTPException, Request

from ..models.user_profile import Identity
from .session_tracker import SessionTracker


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
) -> Identity:
    """Caller identity from the X-User-Id / X-User-Email headers."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return Identity(user_id=x_user_id.strip(), email=x_user_email)


def get_db_path(request: Request) -> Path:
    """Database path from app state."""
    return request.app.state.db_path


def get_tracker(request: Request) -> SessionTracker:
    """Session tracker from app state."""
    return request.app.state.sessions
