"""Rejects request bodies above a fixed size."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_bytes: int = 256 * 1024):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        length = request.headers.get("content-length")
        if length is not None:
            try:
                too_large = int(length) > self.max_bytes
            except ValueError:
                return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid Content-Length"})
            if too_large:
                return JSONResponse(status_code=413, content={"ok": False, "error": "Payload too large"})
        elif request.method in ("POST", "PUT", "PATCH"):
            # chunked upload: read it here so the limit still applies
            body = await request.body()
            if len(body) > self.max_bytes:
                return JSONResponse(status_code=413, content={"ok": False, "error": "Payload too large"})
        return await call_next(request)
