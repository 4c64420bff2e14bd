"""
Classify backend failures for the retry coordinator.

The rendering backend does not expose structured error codes, so the
classification is a heuristic over the exception type and message text.
All of the matching rules live in this module; the retry coordinator only
sees the resulting FailureKind.

Known limitation: a message that happens to contain one of these phrases
for an unrelated reason will be misclassified. Update the pattern tables
when the backend's wording changes.

Errors that carry a `reason` are classified on it alone, so caller input
echoed in the detail, such as the target URL, never matches a pattern.
"""

import re

from ..errors import RateLimited
from .result import FailureKind


class ErrorClassifier:
    """Map an exception raised during an attempt to a FailureKind."""

    RATE_LIMIT_PATTERNS = [
        r'\b429\b',
        r'rate[\s_-]?limit',
        r'too many (?:requests|sessions|browsers)',
        r'overload',
        r'quota',
    ]

    # Page lifecycle races that a fresh session usually resolves
    TRANSIENT_PATTERNS = [
        r'frame (?:was|got) detached',
        r'navigating frame was detached',
        r'execution context was destroyed',
        r'cannot find context with specified id',
        r'target closed',
        r'session closed',
        r'connection (?:closed|reset|refused)',
        r'net::ERR_ABORTED',
        r'net::ERR_CONNECTION_RESET',
        r'navigation timeout',
        r'protocol error .*(?:detached|closed)',
    ]

    def __init__(self):
        self._rate_limit = [re.compile(p, re.IGNORECASE) for p in self.RATE_LIMIT_PATTERNS]
        self._transient = [re.compile(p, re.IGNORECASE) for p in self.TRANSIENT_PATTERNS]

    def classify(self, error: BaseException) -> FailureKind:
        """Classify a single failure."""
        if isinstance(error, RateLimited):
            return FailureKind.RATE_LIMITED

        message = getattr(error, "reason", None) or self.describe(error)

        if any(p.search(message) for p in self._rate_limit):
            return FailureKind.RATE_LIMITED
        if any(p.search(message) for p in self._transient):
            return FailureKind.TRANSIENT
        return FailureKind.FATAL

    @staticmethod
    def describe(error: BaseException) -> str:
        """Human-readable text for an exception, including its type when the message is empty."""
        text = getattr(error, "detail", None) or str(error)
        return text or type(error).__name__
