"""
Page Capture - Full-page and region screenshots from a remote browser.

Usage:
    from page_capture import capture_page

    result = await capture_page({"url": "https://example.com", "mode": "region"})
"""

__version__ = "0.1.0"

# Public API exports
from .api import CaptureService, capture_page
from .cache import CaptureCache, MemoryCacheStore, fingerprint
from .capture.request import CaptureMode, CaptureRequest, resolve_request
from .capture.result import CaptureFailure, CaptureResult, FailureKind
from .config import Settings
from .errors import (
    BackendUnavailable,
    CaptureError,
    InvalidRequest,
    NavigationFailed,
    RateLimited,
)

__all__ = [
    # Version
    "__version__",
    # Main functions
    "capture_page",
    "CaptureService",
    "resolve_request",
    "fingerprint",
    # Types
    "CaptureCache",
    "MemoryCacheStore",
    "CaptureMode",
    "CaptureRequest",
    "CaptureResult",
    "CaptureFailure",
    "FailureKind",
    "Settings",
    # Exceptions
    "CaptureError",
    "InvalidRequest",
    "RateLimited",
    "BackendUnavailable",
    "NavigationFailed",
]
