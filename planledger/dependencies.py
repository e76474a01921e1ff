"""Shared FastAPI dependencies."""
from fastapi import Header, HTTPException


async def get_actor_id(x_user_id: str = Header(default="", alias="X-User-Id")) -> str:
    """
    Identify the acting user.

    Authentication happens upstream; this layer only requires the
    authenticated user id to be forwarded.
    """
    if not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return x_user_id
