"""
Drive one capture attempt against the rendering backend.

Each attempt walks the same steps in order:
1. Acquire a fresh session from the provider
2. Configure user agent, screen media and viewport
3. Navigate, waiting only for the DOM to be constructed
4. Stabilize: locate the region (region mode), settle, freeze animations
5. Capture the full document or the located region
6. Release the session, on every exit path
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, AsyncIterator, Awaitable, Callable

from ..config import Settings
from ..errors import NavigationFailed
from .classifier import ErrorClassifier
from .request import CaptureMode, CaptureRequest
from .result import CaptureResult, FailureKind
from .selectors import find_first_selector


FREEZE_ANIMATIONS_CSS = """
*, *::before, *::after {
  animation: none !important;
  animation-duration: 0s !important;
  animation-delay: 0s !important;
  transition: none !important;
  transition-duration: 0s !important;
  transition-delay: 0s !important;
  caret-color: transparent !important;
}
html { scroll-behavior: auto !important; }
"""


class SessionState(Enum):
    CREATED = auto()
    NAVIGATED = auto()
    STABILIZED = auto()
    CAPTURED = auto()
    RELEASED = auto()
    FAILED = auto()


@dataclass
class Session:
    """A live backend session and the lifecycle states it has been through."""
    handle: Any
    state: SessionState = SessionState.CREATED
    history: list[SessionState] = field(default_factory=lambda: [SessionState.CREATED])

    def advance(self, state: SessionState):
        self.state = state
        self.history.append(state)


@asynccontextmanager
async def open_session(provider) -> AsyncIterator[Session]:
    """
    Acquire a session and guarantee its release.

    Release runs on success, on error and on cancellation. It is shielded so
    a cancelled request still closes the browser before the cancellation
    propagates.
    """
    handle = await provider.acquire()
    session = Session(handle=handle)
    print("[Session] Acquired", flush=True)

    try:
        yield session
    except BaseException:
        session.advance(SessionState.FAILED)
        raise
    finally:
        try:
            await asyncio.shield(handle.release())
        except Exception as e:
            print(f"[Session] Release error: {e}", flush=True)
        session.advance(SessionState.RELEASED)
        print("[Session] Released", flush=True)


async def capture_once(
    provider,
    request: CaptureRequest,
    settings: Settings,
    *,
    classifier: ErrorClassifier | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> CaptureResult:
    """
    Run a single capture attempt.

    Args:
        provider: Object with an async acquire() returning a backend session
        request: Resolved capture request
        settings: Timeouts, user agent and settle interval
        classifier: Used by the selector engine to tell broken sessions from bad selectors
        sleep: Settle coroutine, replaceable in tests

    Returns:
        CaptureResult with the PNG bytes. In region mode with no resolved
        candidate, or one that cannot be captured (hidden or detached), the
        full document is returned with region_found=False.

    Raises:
        RateLimited, BackendUnavailable: From acquisition
        NavigationFailed: If the page does not load
        Exception: Anything else the backend raises while capturing
    """
    classifier = classifier or ErrorClassifier()

    async with open_session(provider) as session:
        page = session.handle

        await page.configure(
            user_agent=settings.user_agent,
            width=request.width,
            height=request.height,
            device_scale_factor=settings.device_scale_factor,
        )

        print(f"[Session] Navigating to {request.url}...", flush=True)
        try:
            await page.navigate(request.url, settings.navigation_timeout)
        except Exception as e:
            reason = classifier.describe(e)
            raise NavigationFailed(f"Navigation to {request.url} failed: {reason}", reason=reason) from e
        session.advance(SessionState.NAVIGATED)

        match = None
        if request.mode is CaptureMode.REGION:
            match = await find_first_selector(
                page,
                request.selectors,
                timeout=settings.selector_timeout,
                classifier=classifier,
            )

        await sleep(settings.settle_seconds)
        await page.add_style(FREEZE_ANIMATIONS_CSS)
        session.advance(SessionState.STABILIZED)

        image = None
        if match is not None:
            try:
                image = await page.screenshot_element(match.element)
            except Exception as e:
                # Hidden or detached element; a broken session still propagates
                if classifier.classify(e) is not FailureKind.FATAL:
                    raise
                print(f"[Session] Region {match.selector} not capturable: {classifier.describe(e)}", flush=True)
                match = None

        if image is None:
            if request.mode is CaptureMode.REGION:
                print("[Session] Region not found, capturing full page", flush=True)
            image = await page.screenshot(full_page=True)
        session.advance(SessionState.CAPTURED)

        print(f"[Session] Captured {len(image)} bytes ({request.describe()})", flush=True)

    return CaptureResult(
        request=request,
        image=image,
        region_found=request.mode is CaptureMode.FULL or match is not None,
        selector=match.selector if match else None,
    )
