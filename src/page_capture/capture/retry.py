"""
Bounded retry around capture attempts.

Policy, driven entirely by the ErrorClassifier:
- RATE_LIMITED: surface immediately, the caller should retry later
- TRANSIENT: one more full attempt with a fresh session, no delay
- FATAL: surface immediately
- Success, including a region-not-found soft failure: return immediately

Only classified transient failures are retried, and never more than once.
"""

from enum import Enum, auto
from typing import Awaitable, Callable

from .classifier import ErrorClassifier
from .request import CaptureRequest
from .result import CaptureResult, FailureKind


MAX_ATTEMPTS = 2


class RetryState(Enum):
    IDLE = auto()
    ATTEMPTING = auto()
    RETRYING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class RetryCoordinator:
    """Run an attempt factory under the one-retry policy."""

    def __init__(self, classifier: ErrorClassifier | None = None, max_attempts: int = MAX_ATTEMPTS):
        self.classifier = classifier or ErrorClassifier()
        self.max_attempts = max_attempts
        self.state = RetryState.IDLE
        self.transitions: list[RetryState] = [RetryState.IDLE]

    def _enter(self, state: RetryState):
        self.state = state
        self.transitions.append(state)

    async def run(
        self,
        request: CaptureRequest,
        attempt: Callable[[], Awaitable[CaptureResult]],
    ) -> CaptureResult:
        """
        Call `attempt` until it succeeds or the policy gives up.

        Exceptions raised by `attempt` are classified and turned into
        failure results; they never escape this method (cancellation aside).
        """
        attempts = 0

        while True:
            attempts += 1
            self._enter(RetryState.ATTEMPTING)

            try:
                result = await attempt()
            except Exception as e:
                kind = self.classifier.classify(e)
                detail = self.classifier.describe(e)
                print(f"[Retry] Attempt {attempts} failed ({kind.value}): {detail}", flush=True)

                if kind is FailureKind.TRANSIENT and attempts < self.max_attempts:
                    self._enter(RetryState.RETRYING)
                    continue

                self._enter(RetryState.FAILED)
                return CaptureResult.failed(request, kind, detail, attempts=attempts)

            self._enter(RetryState.SUCCEEDED)
            if attempts > 1:
                print(f"[Retry] Succeeded on attempt {attempts}", flush=True)
            return result.with_attempts(attempts)
