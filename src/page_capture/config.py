"""
Runtime configuration for Page Capture.

All values come from environment variables so the same code runs locally,
under the CLI, and inside the Modal container.
"""

import os
from dataclasses import dataclass, field, replace


DEFAULT_URL = "https://example.com/"

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 PageCapture/0.1'
)

# Tried in order when mode=region
DEFAULT_SELECTORS = ("#capture", "[data-capture]", "main", "article")

SETTLE_MIN = 1.0
SETTLE_MAX = 1.5


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        print(f"[Config] Ignoring {name}={raw!r}, using {default}", flush=True)
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name)
    if not raw:
        return default
    items = tuple(s.strip() for s in raw.split(",") if s.strip())
    return items or default


def clamp_settle(seconds: float) -> float:
    """Keep a non-zero settle interval within [SETTLE_MIN, SETTLE_MAX]."""
    if seconds <= 0:
        return 0.0
    return min(SETTLE_MAX, max(SETTLE_MIN, seconds))


@dataclass(frozen=True)
class Settings:
    """Service configuration."""

    default_url: str = DEFAULT_URL
    token: str | None = None

    # ws:// or http:// DevTools endpoint of the remote backend.
    # When unset a local Chromium is launched per session.
    browser_endpoint: str | None = None
    chromium_path: str | None = None

    user_agent: str = DEFAULT_USER_AGENT
    selectors: tuple[str, ...] = field(default=DEFAULT_SELECTORS)
    selector_timeout: float = 8.0
    settle_seconds: float = 1.25
    navigation_timeout: float = 30.0
    device_scale_factor: float = 1.0

    # Seconds; 0 disables response caching
    cache_ttl: float = 300.0

    def __post_init__(self):
        object.__setattr__(self, "settle_seconds", clamp_settle(self.settle_seconds))
        object.__setattr__(self, "selectors", tuple(self.selectors))
        if not self.selectors:
            raise ValueError("at least one region selector must be configured")

    @property
    def cache_enabled(self) -> bool:
        return self.cache_ttl > 0

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            default_url=os.environ.get("CAPTURE_DEFAULT_URL") or DEFAULT_URL,
            token=os.environ.get("CAPTURE_TOKEN") or None,
            browser_endpoint=os.environ.get("CAPTURE_BROWSER_ENDPOINT") or None,
            chromium_path=os.environ.get("PYPPETEER_CHROMIUM_EXECUTABLE") or None,
            user_agent=os.environ.get("CAPTURE_USER_AGENT") or DEFAULT_USER_AGENT,
            selectors=_env_list("CAPTURE_SELECTORS", DEFAULT_SELECTORS),
            selector_timeout=_env_float("CAPTURE_SELECTOR_TIMEOUT", 8.0),
            settle_seconds=_env_float("CAPTURE_SETTLE_SECONDS", 1.25),
            navigation_timeout=_env_float("CAPTURE_NAVIGATION_TIMEOUT", 30.0),
            device_scale_factor=_env_float("CAPTURE_DEVICE_SCALE_FACTOR", 1.0),
            cache_ttl=_env_float("CAPTURE_CACHE_TTL", 300.0),
        )
