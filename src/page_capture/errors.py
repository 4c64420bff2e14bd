"""
Exceptions raised while resolving and capturing a page.

Everything the capture pipeline raises derives from CaptureError so the
HTTP layer and the retry coordinator can catch one type and read `.detail`.
"""


class CaptureError(Exception):
    """Base class for capture failures."""

    def __init__(self, detail: str, reason: str | None = None):
        super().__init__(detail)
        self.detail = detail
        # Backend error text alone, without caller input such as the URL
        self.reason = reason if reason is not None else detail


class InvalidRequest(CaptureError):
    """Raised by the resolver when parameters cannot form a request."""
    pass


class RateLimited(CaptureError):
    """Raised when the rendering backend signals overload."""
    pass


class BackendUnavailable(CaptureError):
    """Raised when a browser session cannot be obtained for any other reason."""
    pass


class NavigationFailed(CaptureError):
    """Raised when the target page fails to load."""
    pass
