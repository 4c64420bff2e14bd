"""Capture outcomes passed between session, retry, cache and HTTP layers."""

from dataclasses import dataclass, replace
from enum import Enum

from .request import CaptureRequest


class FailureKind(str, Enum):
    """Classification of a backend failure."""
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


@dataclass(frozen=True)
class CaptureFailure:
    """A hard failure, with the request echoed back for diagnostics."""
    kind: FailureKind
    detail: str
    request: CaptureRequest


@dataclass(frozen=True)
class CaptureResult:
    """
    Either an encoded image or a failure, never both.

    `region_found` is False when region mode fell back to a full-page
    image (a soft failure). `cached` is set by the cache gate on a hit.
    """
    request: CaptureRequest
    image: bytes | None = None
    content_type: str = "image/png"
    failure: CaptureFailure | None = None
    region_found: bool = True
    selector: str | None = None
    attempts: int = 1
    cached: bool = False
    # Seconds of freshness left, set on cache hits
    max_age: float | None = None

    def __post_init__(self):
        if (self.image is None) == (self.failure is None):
            raise ValueError("CaptureResult needs exactly one of image or failure")

    @property
    def ok(self) -> bool:
        return self.image is not None

    @property
    def soft_failure(self) -> bool:
        return self.ok and not self.region_found

    @classmethod
    def failed(cls, request: CaptureRequest, kind: FailureKind, detail: str, attempts: int = 1) -> "CaptureResult":
        return cls(
            request=request,
            failure=CaptureFailure(kind=kind, detail=detail, request=request),
            region_found=False,
            attempts=attempts,
        )

    def with_attempts(self, attempts: int) -> "CaptureResult":
        return replace(self, attempts=attempts)

    def as_cached(self, max_age: float | None = None) -> "CaptureResult":
        return replace(self, cached=True, max_age=max_age)
