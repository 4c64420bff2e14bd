"""
HTTP app for Page Capture.

Provides:
- GET /capture  - Capture from query parameters (url, mode, w, h, debug, token)
- POST /capture - Same, with the parameters in a JSON body
- GET /health   - Service status
- GET /         - Fixed OK

Region-not-found policy: the full-page image is returned with status 200
and an `X-Capture-Region: not-found` header, whatever the debug flag.
"""

import hmac
import traceback
from typing import Any, Mapping, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel

from . import __version__
from .api import CaptureService
from .capture.request import CaptureRequest
from .capture.result import CaptureResult, FailureKind
from .config import Settings
from .errors import InvalidRequest


RETRY_AFTER_SECONDS = 30


class CaptureBody(BaseModel):
    """JSON body for POST /capture. Values are resolved like query parameters."""

    url: Optional[str] = None
    mode: Optional[str] = None
    w: Optional[Union[int, float, str]] = None
    h: Optional[Union[int, float, str]] = None
    debug: Optional[Union[bool, int, str]] = None
    token: Optional[str] = None


# ============================================================================
# Response mapping
# ============================================================================


def _diagnostics(request: CaptureRequest) -> list[str]:
    return [f"url: {request.url}", f"mode: {request.mode.value}"]


def failure_response(result: CaptureResult) -> Response:
    """Plain-text 429/500 carrying enough context to diagnose without logs."""
    failure = result.failure
    request = result.request

    if failure.kind is FailureKind.RATE_LIMITED:
        lines = [f"Rendering backend is rate limited, retry in {RETRY_AFTER_SECONDS}s: {failure.detail}"]
        status = 429
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS), "Cache-Control": "no-store"}
    else:
        lines = [f"Capture failed: {failure.detail}"]
        status = 500
        headers = {"Cache-Control": "no-store"}

    lines += _diagnostics(request)
    if request.debug:
        lines += [
            f"kind: {failure.kind.value}",
            f"attempts: {result.attempts}",
            f"viewport: {request.width}x{request.height}",
            f"selectors: {', '.join(request.selectors) or '-'}",
        ]

    return PlainTextResponse("\n".join(lines) + "\n", status_code=status, headers=headers)


def image_response(result: CaptureResult, settings: Settings) -> Response:
    headers = {"X-Capture-Cache": "hit" if result.cached else "miss"}

    if result.soft_failure or not settings.cache_enabled:
        headers["Cache-Control"] = "no-store"
    else:
        max_age = result.max_age if result.max_age is not None else settings.cache_ttl
        headers["Cache-Control"] = f"public, max-age={int(max_age)}"

    if result.soft_failure:
        headers["X-Capture-Region"] = "not-found"
    elif result.selector:
        headers["X-Capture-Selector"] = result.selector

    return Response(content=result.image, media_type=result.content_type, headers=headers)


def to_response(result: CaptureResult, settings: Settings) -> Response:
    if result.ok:
        return image_response(result, settings)
    return failure_response(result)


# ============================================================================
# App
# ============================================================================


def _authorized(settings: Settings, supplied: str | None) -> bool:
    if not settings.token:
        return True
    if not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), settings.token.encode("utf-8"))


def _bearer(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


def create_app(settings: Settings | None = None, service: CaptureService | None = None) -> FastAPI:
    """Build the FastAPI app around a shared CaptureService."""
    if service is None:
        service = CaptureService(settings)
    settings = service.settings

    web_app = FastAPI(
        title="Page Capture API",
        description="Full-page and region screenshots from a remote browser",
        version=__version__,
    )

    async def handle(params: Mapping[str, Any], token: str | None) -> Response:
        if not _authorized(settings, token):
            raise HTTPException(status_code=401, detail="Invalid or missing token")

        try:
            capture_request = service.resolve(params)
        except InvalidRequest as e:
            print(f"[API] Invalid request: {e.detail}", flush=True)
            body = f"Invalid request: {e.detail}\nurl: {params.get('url') or settings.default_url}\nmode: {params.get('mode')}\n"
            return PlainTextResponse(body, status_code=400, headers={"Cache-Control": "no-store"})

        try:
            result = await service.capture(capture_request)
        except Exception as e:
            print(f"[API] Capture error: {e}", flush=True)
            traceback.print_exc()
            body = f"Capture failed: {e}\n" + "\n".join(_diagnostics(capture_request)) + "\n"
            return PlainTextResponse(body, status_code=500, headers={"Cache-Control": "no-store"})

        return to_response(result, settings)

    @web_app.get("/")
    async def index():
        return PlainTextResponse("OK")

    @web_app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": "page-capture",
            "version": __version__,
            "cache": {"enabled": settings.cache_enabled, "ttl": settings.cache_ttl},
        }

    @web_app.get("/capture")
    async def capture_get(request: Request):
        params = dict(request.query_params)
        token = params.pop("token", None) or _bearer(request)
        return await handle(params, token)

    @web_app.post("/capture")
    async def capture_post(body: CaptureBody, request: Request):
        params = body.model_dump(exclude_none=True)
        token = params.pop("token", None) or _bearer(request)
        return await handle(params, token)

    return web_app
