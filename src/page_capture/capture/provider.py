"""
Browser sessions backed by Pyppeteer.

A provider hands out one session per capture attempt. Sessions are never
reused: each acquire() either connects to the remote DevTools endpoint or
launches a local Chromium, and release() closes it again.

The capture session only relies on the small set of coroutines defined on
PyppeteerSession, so tests substitute an in-memory stub with the same
methods.
"""

from typing import Any, Optional

import aiohttp
from pyppeteer import connect, launch
from pyppeteer.browser import Browser
from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError
from pyppeteer.page import Page

from ..config import Settings
from ..errors import BackendUnavailable, RateLimited
from .classifier import ErrorClassifier
from .result import FailureKind


LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-gpu',
]


class PyppeteerSession:
    """One browser plus one page, owned by a single capture attempt."""

    def __init__(self, browser: Browser, page: Page):
        self.browser = browser
        self.page = page

    async def configure(self, *, user_agent: str, width: int, height: int, device_scale_factor: float = 1.0):
        await self.page.setUserAgent(user_agent)
        # Screen styles, not print styles
        await self.page.emulateMedia('screen')
        await self.page.setViewport({
            'width': width,
            'height': height,
            'deviceScaleFactor': device_scale_factor,
        })

    async def navigate(self, url: str, timeout: float):
        # DOM ready only; pages with polling or timers never reach network idle
        await self.page.goto(url, {
            'waitUntil': 'domcontentloaded',
            'timeout': int(timeout * 1000),
        })

    async def query(self, selector: str, timeout: float) -> Optional[Any]:
        """Wait for `selector` to be visible; None if it is not within `timeout` seconds."""
        try:
            return await self.page.waitForSelector(selector, {'visible': True, 'timeout': int(timeout * 1000)})
        except PyppeteerTimeoutError:
            return None

    async def add_style(self, css: str):
        await self.page.addStyleTag({'content': css})

    async def screenshot(self, full_page: bool) -> bytes:
        return await self.page.screenshot({'type': 'png', 'fullPage': full_page})

    async def screenshot_element(self, element: Any) -> bytes:
        return await element.screenshot({'type': 'png'})

    async def release(self):
        await self.browser.close()


async def resolve_ws_endpoint(endpoint: str, timeout: float = 10.0) -> str:
    """
    Turn a DevTools endpoint into a WebSocket URL.

    ws:// and wss:// endpoints are returned as-is. For http(s):// endpoints
    the `/json/version` document is fetched and its webSocketDebuggerUrl used.

    Raises:
        RateLimited: If the endpoint answers 429
        BackendUnavailable: For any other non-200 answer or a missing URL
    """
    if endpoint.startswith(('ws://', 'wss://')):
        return endpoint

    version_url = endpoint.rstrip('/') + '/json/version'
    async with aiohttp.ClientSession() as http:
        async with http.get(version_url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
            if response.status == 429:
                raise RateLimited(f"Backend overloaded (HTTP 429 from {version_url})")
            if response.status != 200:
                raise BackendUnavailable(f"HTTP {response.status} from {version_url}")
            data = await response.json(content_type=None)

    ws_url = data.get('webSocketDebuggerUrl') if isinstance(data, dict) else None
    if not ws_url:
        raise BackendUnavailable(f"No webSocketDebuggerUrl in {version_url}")
    return ws_url


class PyppeteerProvider:
    """Acquire fresh Pyppeteer sessions from a remote endpoint or a local Chromium."""

    def __init__(self, settings: Settings, classifier: ErrorClassifier | None = None):
        self.settings = settings
        self.classifier = classifier or ErrorClassifier()

    async def _open_browser(self) -> Browser:
        if self.settings.browser_endpoint:
            ws_url = await resolve_ws_endpoint(self.settings.browser_endpoint)
            print(f"[Provider] Connecting to {ws_url}...", flush=True)
            return await connect(browserWSEndpoint=ws_url)

        print("[Provider] Launching local browser...", flush=True)
        options = dict(
            headless=True,
            args=LAUNCH_ARGS,
            handleSIGINT=False,
            handleSIGTERM=False,
            handleSIGHUP=False,
        )
        if self.settings.chromium_path:
            options['executablePath'] = self.settings.chromium_path
        return await launch(**options)

    async def acquire(self) -> PyppeteerSession:
        """
        Obtain a new session.

        Raises:
            RateLimited: If the backend signals overload
            BackendUnavailable: For any other acquisition failure
        """
        try:
            browser = await self._open_browser()
        except (RateLimited, BackendUnavailable):
            raise
        except Exception as e:
            raise self._acquisition_error(e) from e

        try:
            page = await browser.newPage()
        except Exception as e:
            await browser.close()
            raise self._acquisition_error(e) from e

        return PyppeteerSession(browser, page)

    def _acquisition_error(self, error: Exception) -> Exception:
        detail = self.classifier.describe(error)
        if self.classifier.classify(error) is FailureKind.RATE_LIMITED:
            return RateLimited(detail)
        return BackendUnavailable(detail)
