"""Aggregate all API routers."""

from fastapi import APIRouter
from app.api.v1.health import router as health_router
from app.api.v1.folders import router as folders_router
from app.api.v1.downloads import router as downloads_router
from app.api.v1.compat import router as compat_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(folders_router, tags=["folders"])
v1_router.include_router(downloads_router, tags=["downloads"])

# Compatibility shim — mounts the extension's /api/* paths
compat_router_api = APIRouter(prefix="/api")
compat_router_api.include_router(health_router, tags=["health"])
compat_router_api.include_router(compat_router, tags=["extension"])
