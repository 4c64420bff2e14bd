"""
Capture module for Page Capture.

Request resolution, per-attempt browser sessions, selector fallback,
failure classification and retry.
"""

from .classifier import ErrorClassifier
from .request import CaptureMode, CaptureRequest, resolve_request
from .result import CaptureFailure, CaptureResult, FailureKind
from .retry import RetryCoordinator, RetryState
from .selectors import SelectorMatch, find_first_selector
from .session import Session, SessionState, capture_once, open_session

__all__ = [
    'ErrorClassifier',
    'CaptureMode',
    'CaptureRequest',
    'resolve_request',
    'CaptureFailure',
    'CaptureResult',
    'FailureKind',
    'RetryCoordinator',
    'RetryState',
    'SelectorMatch',
    'find_first_selector',
    'Session',
    'SessionState',
    'capture_once',
    'open_session',
]
