"""
Resolve raw query parameters into a CaptureRequest.

Key requirements:
- Mode must be "full" or "region"; anything else is rejected
- Width/height that fail to parse fall back to 1200x900
- Out-of-range sizes are clamped, never rejected
- Region selectors come from configuration, not from the caller
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from ..errors import InvalidRequest


MIN_WIDTH, MAX_WIDTH = 320, 2400
MIN_HEIGHT, MAX_HEIGHT = 320, 4000
DEFAULT_WIDTH, DEFAULT_HEIGHT = 1200, 900

TRUTHY = {"1", "true", "yes", "on"}


class CaptureMode(str, Enum):
    """What part of the page to capture."""
    FULL = "full"      # entire rendered document
    REGION = "region"  # bounding box of the first matching selector


@dataclass(frozen=True)
class CaptureRequest:
    """A normalized, read-only capture request."""
    url: str
    mode: CaptureMode
    width: int
    height: int
    selectors: tuple[str, ...] = field(default=())
    debug: bool = False

    def describe(self) -> str:
        """Short target/mode summary for logs and failure bodies."""
        return f"url={self.url} mode={self.mode.value} viewport={self.width}x{self.height}"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def parse_dimension(raw: Any, default: int) -> int:
    """
    Parse a width/height parameter.

    Accepts ints, numeric strings and floats (truncated). Anything that
    does not parse yields `default`.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return default
        try:
            value = float(text)
        except ValueError:
            return default
    if value != value or value in (float("inf"), float("-inf")):
        return default
    return int(value)


def parse_mode(raw: Any) -> CaptureMode:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return CaptureMode.REGION
    try:
        return CaptureMode(str(raw).strip().lower())
    except ValueError:
        raise InvalidRequest(f"mode must be 'full' or 'region', got {raw!r}")


def parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    return str(raw).strip().lower() in TRUTHY


def resolve_request(
    params: Mapping[str, Any],
    *,
    default_url: str,
    selectors: tuple[str, ...] | list[str],
) -> CaptureRequest:
    """
    Build a CaptureRequest from raw parameters.

    Args:
        params: Untyped parameters (url, mode, w, h, debug)
        default_url: Address used when `url` is missing or blank
        selectors: Configured region candidates, in fallback order

    Returns:
        CaptureRequest with clamped viewport

    Raises:
        InvalidRequest: If mode is not one of the supported values
        ValueError: If region mode is requested with no configured selectors
    """
    mode = parse_mode(params.get("mode"))

    url = params.get("url")
    url = str(url).strip() if url is not None else ""
    if not url:
        url = default_url

    width = clamp(parse_dimension(params.get("w"), DEFAULT_WIDTH), MIN_WIDTH, MAX_WIDTH)
    height = clamp(parse_dimension(params.get("h"), DEFAULT_HEIGHT), MIN_HEIGHT, MAX_HEIGHT)

    if mode is CaptureMode.REGION:
        candidates = tuple(selectors)
        if not candidates:
            raise ValueError("region mode requires at least one configured selector")
    else:
        candidates = ()

    return CaptureRequest(
        url=url,
        mode=mode,
        width=width,
        height=height,
        selectors=candidates,
        debug=parse_flag(params.get("debug")),
    )
