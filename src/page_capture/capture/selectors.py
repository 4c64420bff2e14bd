"""
Locate the capture region from an ordered list of candidate selectors.

Candidates are tried strictly in order, each with its own wait bound. The
first one that appears wins; later candidates are never queried and a
candidate that timed out is never tried again. Running out of candidates
is a normal outcome, reported as None.
"""

from dataclasses import dataclass
from typing import Any

from .classifier import ErrorClassifier
from .result import FailureKind


DEFAULT_SELECTOR_TIMEOUT = 8.0


@dataclass
class SelectorMatch:
    """The candidate that resolved and its element handle."""
    selector: str
    element: Any
    index: int


async def find_first_selector(
    session,
    selectors: tuple[str, ...] | list[str],
    timeout: float = DEFAULT_SELECTOR_TIMEOUT,
    classifier: ErrorClassifier | None = None,
) -> SelectorMatch | None:
    """
    Return the first candidate whose element appears within `timeout` seconds.

    A candidate whose query fails outright (for example an invalid selector)
    is skipped like a timeout. Failures that mean the session itself broke
    (rate-limited or transient per the classifier) propagate.
    """
    if not selectors:
        raise ValueError("At least one candidate selector is required")

    classifier = classifier or ErrorClassifier()

    for index, selector in enumerate(selectors):
        try:
            element = await session.query(selector, timeout)
        except Exception as e:
            if classifier.classify(e) is not FailureKind.FATAL:
                raise
            print(f"[Selectors] {selector!r} failed: {classifier.describe(e)}", flush=True)
            continue

        if element is not None:
            print(f"[Selectors] Matched {selector!r} (candidate {index + 1}/{len(selectors)})", flush=True)
            return SelectorMatch(selector=selector, element=element, index=index)

        print(f"[Selectors] {selector!r} not found within {timeout}s", flush=True)

    print(f"[Selectors] None of {len(selectors)} candidates resolved", flush=True)
    return None
