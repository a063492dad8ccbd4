"""Bearer API key dependency for FastAPI."""

import secrets

from fastapi import Header, HTTPException

from app.config import settings


async def verify_api_key(authorization: str = Header(None)) -> None:
    """Reject requests whose Authorization header does not carry the API key."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    token = authorization[len("Bearer "):].strip()
    expected = settings.api_key.encode()
    if not token or not expected or not secrets.compare_digest(token.encode(), expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
