"""
Public API for Page Capture.

This is the primary interface for programmatic use. The HTTP app, the
Modal deployment and the CLI all go through CaptureService rather than
wiring the capture modules together themselves.

Example usage:
    from page_capture.api import capture_page

    result = await capture_page({"url": "https://example.com", "mode": "full"})
    if result.ok:
        Path("shot.png").write_bytes(result.image)
"""

import asyncio
from typing import Any, Awaitable, Callable, Mapping

from .cache import CaptureCache
from .capture.classifier import ErrorClassifier
from .capture.provider import PyppeteerProvider
from .capture.request import CaptureRequest, resolve_request
from .capture.result import CaptureResult
from .capture.retry import RetryCoordinator
from .capture.session import capture_once
from .config import Settings


# ============================================================================
# Service
# ============================================================================


class CaptureService:
    """
    Resolve, cache-check, capture with retry, and cache the result.

    One service is shared by all requests; nothing in it is mutated per
    request except the cache store.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        provider=None,
        cache: CaptureCache | None = None,
        classifier: ErrorClassifier | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings or Settings.from_env()
        self.classifier = classifier or ErrorClassifier()
        self.provider = provider or PyppeteerProvider(self.settings, self.classifier)
        self.cache = cache if cache is not None else CaptureCache(ttl=self.settings.cache_ttl)
        self.sleep = sleep

    def resolve(self, params: Mapping[str, Any]) -> CaptureRequest:
        """
        Normalize raw parameters.

        Raises:
            InvalidRequest: If mode is not "full" or "region"
        """
        return resolve_request(
            params,
            default_url=self.settings.default_url,
            selectors=self.settings.selectors,
        )

    async def capture(self, request: CaptureRequest) -> CaptureResult:
        """Capture a resolved request, serving from cache when fresh."""
        return await self.cache.get_or_capture(request, lambda: self._capture_with_retry(request))

    async def capture_params(self, params: Mapping[str, Any]) -> CaptureResult:
        return await self.capture(self.resolve(params))

    async def _capture_with_retry(self, request: CaptureRequest) -> CaptureResult:
        print(f"[API] Capturing {request.describe()}", flush=True)
        coordinator = RetryCoordinator(self.classifier)
        return await coordinator.run(
            request,
            lambda: capture_once(
                self.provider,
                request,
                self.settings,
                classifier=self.classifier,
                sleep=self.sleep,
            ),
        )


# ============================================================================
# Convenience
# ============================================================================


async def capture_page(
    params: Mapping[str, Any],
    *,
    settings: Settings | None = None,
    provider=None,
    cache: CaptureCache | None = None,
) -> CaptureResult:
    """
    One-shot capture from raw parameters.

    Builds a throwaway CaptureService; long-running callers should keep a
    service around so the cache is shared.

    Raises:
        InvalidRequest: If mode is not "full" or "region"
    """
    service = CaptureService(settings, provider=provider, cache=cache)
    return await service.capture_params(params)
