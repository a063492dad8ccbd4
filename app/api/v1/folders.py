"""Music library folders API."""

from fastapi import APIRouter, Depends, HTTPException

from app.auth.api_key import verify_api_key

router = APIRouter(dependencies=[Depends(verify_api_key)])

# Set by main.py during lifespan
_library = None


def set_library(library):
    global _library
    _library = library


def get_library():
    if _library is None:
        raise HTTPException(status_code=503, detail="Music library not initialized")
    return _library


@router.get("/folders")
async def list_folders():
    """Existing folders under the music root, sorted by name."""
    return {"folders": get_library().list_folders()}
